from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .geo import GeoPoint
from .gtfs import CalendarEntry, ExceptionType, GtfsRoute, GtfsTrip, StopTime
from .stop import Stop


def _empty() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class RecordStore:
    """Indexed, read-only view of one loaded feed.

    Built once by a load and never mutated afterwards; a reload produces a new
    instance. All mappings are MappingProxyType views over private dicts.
    """

    routes_by_id: Mapping[str, GtfsRoute] = field(default_factory=_empty)
    stops_by_id: Mapping[str, Stop] = field(default_factory=_empty)
    trips_by_id: Mapping[str, GtfsTrip] = field(default_factory=_empty)
    trip_ids_by_short_name: Mapping[str, tuple[str, ...]] = field(default_factory=_empty)
    # Each sequence is sorted by stop_sequence.
    stop_times_by_trip: Mapping[str, tuple[StopTime, ...]] = field(default_factory=_empty)
    calendar_by_service: Mapping[str, CalendarEntry] = field(default_factory=_empty)
    exceptions_by_service: Mapping[str, Mapping[int, ExceptionType]] = field(default_factory=_empty)
    shapes_by_id: Mapping[str, tuple[GeoPoint, ...]] = field(default_factory=_empty)
    has_calendar_data: bool = False

    @property
    def is_loaded(self) -> bool:
        return bool(self.routes_by_id) and bool(self.stops_by_id)


EMPTY_RECORD_STORE = RecordStore()


@dataclass(frozen=True, slots=True)
class LoadReport:
    """Outcome of a load: rows kept and rows dropped, per entity type."""

    loaded: Mapping[str, int] = field(default_factory=dict)
    skipped: Mapping[str, int] = field(default_factory=dict)
    has_calendar_data: bool = False
    is_loaded: bool = False

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())
