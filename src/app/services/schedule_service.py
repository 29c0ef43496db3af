from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Mapping

from src.app.ports.output import IGtfsRepository
from src.domain.algorithms import search as search_algo
from src.domain.algorithms import trip_queries
from src.domain.algorithms.indexing import build_record_store
from src.domain.algorithms.service_calendar import is_service_active
from src.domain.algorithms.time_utils import ServiceDate
from src.domain.exceptions import FeedNotLoaded
from src.domain.models import (
    EMPTY_RECORD_STORE,
    EnrichedStopTime,
    FeedSnapshot,
    GeoPoint,
    GtfsRoute,
    GtfsTrip,
    LoadReport,
    RecordStore,
    SearchResult,
    Stop,
    TripMatch,
)

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE_NAME = "Unknown Route"


@dataclass(slots=True)
class ScheduleService:
    """Owns the published RecordStore and answers schedule queries.

    One load runs at a time; queries never lock. A load builds its store off
    to the side and publishes it with a single attribute assignment, and every
    query reads that attribute exactly once, so a query sees either the old
    feed or the new one, never a mix. `is_loaded` is derived from the same
    published store.

    Before the first load every query answers from an empty store; callers
    that need a feed use `require_loaded()`.
    """

    gtfs_repository: IGtfsRepository | None = None

    # (store, report) from the latest load, swapped as one reference.
    _published: tuple[RecordStore, LoadReport] | None = field(
        default=None, init=False, repr=False
    )
    _write_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    # Load transaction

    def load(self, snapshot: FeedSnapshot) -> LoadReport:
        with self._write_lock:
            store, report = build_record_store(snapshot)
            self._published = (store, report)
        logger.info(
            "Published schedule store (loaded=%s, calendar=%s)",
            report.is_loaded,
            report.has_calendar_data,
        )
        return report

    def reload(self) -> LoadReport:
        if self.gtfs_repository is None:
            raise RuntimeError("GTFS repository not configured")
        return self.load(self.gtfs_repository.load_snapshot())

    def _current(self) -> RecordStore:
        published = self._published
        return published[0] if published is not None else EMPTY_RECORD_STORE

    @property
    def is_loaded(self) -> bool:
        return self._current().is_loaded

    @property
    def has_loaded_once(self) -> bool:
        return self._published is not None

    @property
    def last_report(self) -> LoadReport | None:
        published = self._published
        return published[1] if published is not None else None

    def status(self) -> tuple[bool, LoadReport | None]:
        """Loaded flag and report of the same published load."""

        published = self._published
        if published is None:
            return False, None
        store, report = published
        return store.is_loaded, report

    def require_loaded(self) -> RecordStore:
        store = self._current()
        if not store.is_loaded:
            raise FeedNotLoaded("GTFS feed not loaded")
        return store

    # Lookups. The get_* accessors return None when absent; route_name and
    # stop_name apply the display defaults used by the UI.

    def get_route(self, route_id: str) -> GtfsRoute | None:
        return self._current().routes_by_id.get(route_id)

    def get_stop(self, stop_id: str) -> Stop | None:
        return self._current().stops_by_id.get(stop_id)

    def get_trip(self, trip_id: str) -> GtfsTrip | None:
        return self._current().trips_by_id.get(trip_id)

    def route_name(self, route_id: str) -> str:
        route = self.get_route(route_id)
        if route is None or not route.long_name:
            return UNKNOWN_ROUTE_NAME
        return route.long_name

    def stop_name(self, stop_id: str) -> str:
        return trip_queries.stop_display_name(self._current(), stop_id)

    def train_number(self, trip_id: str) -> str | None:
        return trip_queries.train_number(self._current(), trip_id)

    def route_id_for_trip(self, trip_id: str) -> str | None:
        return trip_queries.route_id_for_trip(self._current(), trip_id)

    def all_routes(self) -> tuple[GtfsRoute, ...]:
        return tuple(self._current().routes_by_id.values())

    def all_stops(self) -> tuple[Stop, ...]:
        return tuple(self._current().stops_by_id.values())

    def all_trip_ids(self) -> tuple[str, ...]:
        return tuple(self._current().stop_times_by_trip.keys())

    def all_trips(self) -> tuple[GtfsTrip, ...]:
        return tuple(self._current().trips_by_id.values())

    # Calendar and trip queries

    def is_service_active_on_date(self, service_id: str, on: ServiceDate) -> bool:
        return is_service_active(self._current(), service_id, on)

    def get_trips_for_stop(
        self, stop_id: str, on: ServiceDate | None = None
    ) -> tuple[str, ...]:
        return trip_queries.trips_at_stop(self._current(), stop_id, on)

    def get_stop_times_for_trip(self, trip_id: str) -> tuple[EnrichedStopTime, ...]:
        return trip_queries.stop_times_for_trip(self._current(), trip_id)

    def get_intermediate_stops(self, trip_id: str) -> tuple[EnrichedStopTime, ...]:
        return trip_queries.intermediate_stops(self._current(), trip_id)

    def find_trips_with_stops(
        self, from_stop_id: str, to_stop_id: str, on: ServiceDate | None = None
    ) -> tuple[TripMatch, ...]:
        return trip_queries.trips_connecting(
            self._current(), from_stop_id, to_stop_id, on
        )

    # Search

    def search(self, query: str) -> tuple[SearchResult, ...]:
        return search_algo.search(self._current(), query)

    def search_stations(self, query: str) -> tuple[Stop, ...]:
        return search_algo.search_stations(self._current(), query)

    # Shapes, passed through for map rendering

    def get_shape(self, shape_id: str) -> tuple[GeoPoint, ...]:
        return self._current().shapes_by_id.get(shape_id, ())

    def all_shape_ids(self) -> tuple[str, ...]:
        return tuple(self._current().shapes_by_id.keys())

    def all_shapes(self) -> Mapping[str, tuple[GeoPoint, ...]]:
        return self._current().shapes_by_id
