from __future__ import annotations

import logging
from collections import Counter
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from src.domain.algorithms.time_utils import to_date_int
from src.domain.exceptions import InvalidServiceDate
from src.domain.models.geo import GeoPoint, coerce_geo_point
from src.domain.models.gtfs import (
    CalendarDateException,
    CalendarEntry,
    ExceptionType,
    FeedSnapshot,
    GtfsRoute,
    GtfsTrip,
    StopTime,
)
from src.domain.models.stop import Stop
from src.domain.models.store import LoadReport, RecordStore

logger = logging.getLogger(__name__)

_WEEKDAY_COLUMNS = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

_EXCEPTION_CODES = {
    "1": ExceptionType.ADDED,
    "added": ExceptionType.ADDED,
    "2": ExceptionType.REMOVED,
    "removed": ExceptionType.REMOVED,
}


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _rows(rows: Iterable[Any] | None) -> Iterable[Any]:
    return rows or ()


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def build_record_store(snapshot: FeedSnapshot) -> tuple[RecordStore, LoadReport]:
    """Index a decoded feed into a fresh RecordStore.

    Rows without their identifying key, or whose required fields don't parse,
    are dropped and counted in the returned LoadReport. Nothing is raised for
    dirty data; a partially usable feed still yields a usable store.

    The returned store shares no mutable state with any previous store, so
    publishing it is a single reference swap.
    """

    loaded: Counter[str] = Counter()
    skipped: Counter[str] = Counter()

    routes_by_id: dict[str, GtfsRoute] = {}
    for row in _rows(snapshot.routes):
        if not isinstance(row, Mapping) or not _text(row, "route_id"):
            skipped["routes"] += 1
            continue
        route_id = _text(row, "route_id")
        short_name = _text(row, "route_short_name") or None
        routes_by_id[route_id] = GtfsRoute(
            route_id=route_id,
            long_name=_text(row, "route_long_name") or short_name or "",
            short_name=short_name,
        )
        loaded["routes"] += 1

    stops_by_id: dict[str, Stop] = {}
    for row in _rows(snapshot.stops):
        if not isinstance(row, Mapping) or not _text(row, "stop_id"):
            skipped["stops"] += 1
            continue
        stop_id = _text(row, "stop_id")
        location = coerce_geo_point(row.get("stop_lat"), row.get("stop_lon"))
        if location is None:
            loaded["stops_without_location"] += 1
        stops_by_id[stop_id] = Stop(
            stop_id=stop_id,
            name=_text(row, "stop_name") or stop_id,
            location=location,
        )
        loaded["stops"] += 1

    trips_by_id: dict[str, GtfsTrip] = {}
    for row in _rows(snapshot.trips):
        if not isinstance(row, Mapping) or not _text(row, "trip_id"):
            skipped["trips"] += 1
            continue
        trip = GtfsTrip(
            trip_id=_text(row, "trip_id"),
            route_id=_text(row, "route_id"),
            short_name=_text(row, "trip_short_name"),
            headsign=_text(row, "trip_headsign"),
            service_id=_text(row, "service_id"),
            shape_id=_text(row, "shape_id") or None,
        )
        trips_by_id[trip.trip_id] = trip
        loaded["trips"] += 1

    # A repeated trip_id keeps its last row, so index short names afterwards.
    short_name_index: dict[str, list[str]] = {}
    for trip in trips_by_id.values():
        if trip.short_name:
            short_name_index.setdefault(trip.short_name, []).append(trip.trip_id)

    stop_times_by_trip: dict[str, tuple[StopTime, ...]] = {}
    for raw_trip_id, rows in (snapshot.stop_times_by_trip or {}).items():
        trip_id = str(raw_trip_id or "").strip()
        rows = list(_rows(rows))
        if not trip_id:
            skipped["stop_times"] += len(rows)
            continue

        seen_sequences: set[int] = set()
        entries: list[StopTime] = []
        for row in rows:
            parsed = _parse_stop_time(trip_id, row)
            if parsed is None or parsed.stop_sequence in seen_sequences:
                skipped["stop_times"] += 1
                continue
            seen_sequences.add(parsed.stop_sequence)
            entries.append(parsed)

        if not entries:
            continue
        entries.sort(key=lambda st: st.stop_sequence)
        stop_times_by_trip[trip_id] = tuple(entries)
        loaded["stop_times"] += len(entries)

    shapes_by_id: dict[str, tuple[GeoPoint, ...]] = {}
    for raw_shape_id, points in (snapshot.shapes or {}).items():
        shape_id = str(raw_shape_id or "").strip()
        if not shape_id:
            skipped["shapes"] += 1
            continue
        shape, dropped = _parse_shape(_rows(points))
        skipped["shape_points"] += dropped
        if shape:
            shapes_by_id[shape_id] = shape
            loaded["shapes"] += 1

    calendar_by_service: dict[str, CalendarEntry] = {}
    for row in _rows(snapshot.calendar):
        entry = _parse_calendar_entry(row)
        if entry is None:
            skipped["calendar"] += 1
            continue
        calendar_by_service[entry.service_id] = entry
        loaded["calendar"] += 1

    exceptions: dict[str, dict[int, ExceptionType]] = {}
    for row in _rows(snapshot.calendar_dates):
        exc = _parse_calendar_date(row)
        if exc is None:
            skipped["calendar_dates"] += 1
            continue
        exceptions.setdefault(exc.service_id, {})[exc.date] = exc.exception_type
        loaded["calendar_dates"] += 1

    has_calendar_data = bool(loaded["calendar"] or loaded["calendar_dates"])

    store = RecordStore(
        routes_by_id=MappingProxyType(routes_by_id),
        stops_by_id=MappingProxyType(stops_by_id),
        trips_by_id=MappingProxyType(trips_by_id),
        trip_ids_by_short_name=MappingProxyType(
            {k: tuple(v) for k, v in short_name_index.items()}
        ),
        stop_times_by_trip=MappingProxyType(stop_times_by_trip),
        calendar_by_service=MappingProxyType(calendar_by_service),
        exceptions_by_service=MappingProxyType(
            {k: MappingProxyType(v) for k, v in exceptions.items()}
        ),
        shapes_by_id=MappingProxyType(shapes_by_id),
        has_calendar_data=has_calendar_data,
    )
    report = LoadReport(
        loaded=MappingProxyType(dict(loaded)),
        skipped=MappingProxyType({k: v for k, v in skipped.items() if v}),
        has_calendar_data=has_calendar_data,
        is_loaded=store.is_loaded,
    )

    logger.info(
        "Indexed GTFS feed: %d routes, %d stops, %d trips, %d stop times",
        len(routes_by_id),
        len(stops_by_id),
        len(trips_by_id),
        loaded["stop_times"],
    )
    if report.total_skipped:
        logger.warning("Skipped malformed GTFS rows: %s", dict(report.skipped))

    return store, report


def _parse_stop_time(trip_id: str, row: Any) -> StopTime | None:
    if not isinstance(row, Mapping):
        return None
    stop_id = _text(row, "stop_id")
    if not stop_id:
        return None
    try:
        seq = int(_text(row, "stop_sequence"))
    except ValueError:
        return None
    return StopTime(
        trip_id=trip_id,
        stop_id=stop_id,
        arrival_time=_text(row, "arrival_time"),
        departure_time=_text(row, "departure_time"),
        stop_sequence=seq,
    )


def _parse_shape(points: Iterable[Any]) -> tuple[tuple[GeoPoint, ...], int]:
    ordered: list[tuple[int, int, GeoPoint]] = []
    dropped = 0
    for i, pt in enumerate(points):
        seq = i
        if isinstance(pt, GeoPoint):
            point: GeoPoint | None = pt
        elif isinstance(pt, Mapping):
            point = coerce_geo_point(pt.get("shape_pt_lat"), pt.get("shape_pt_lon"))
            try:
                seq = int(_text(pt, "shape_pt_sequence") or i)
            except ValueError:
                point = None
        elif isinstance(pt, Sequence) and not isinstance(pt, str) and len(pt) == 2:
            point = coerce_geo_point(pt[0], pt[1])
        else:
            point = None

        if point is None:
            dropped += 1
            continue
        ordered.append((seq, i, point))

    ordered.sort(key=lambda x: (x[0], x[1]))
    return tuple(p for _, _, p in ordered), dropped


def _parse_calendar_entry(row: Any) -> CalendarEntry | None:
    if not isinstance(row, Mapping) or not _text(row, "service_id"):
        return None
    try:
        start = to_date_int(_text(row, "start_date"))
        end = to_date_int(_text(row, "end_date"))
    except InvalidServiceDate:
        return None
    days = tuple(_flag(row.get(col)) for col in _WEEKDAY_COLUMNS)
    return CalendarEntry(
        service_id=_text(row, "service_id"),
        start_date=start,
        end_date=end,
        days=days,  # type: ignore[arg-type]
    )


def _parse_calendar_date(row: Any) -> CalendarDateException | None:
    if isinstance(row, CalendarDateException):
        return row
    if not isinstance(row, Mapping) or not _text(row, "service_id"):
        return None
    raw_type = row.get("exception_type")
    if isinstance(raw_type, ExceptionType):
        exc_type: ExceptionType | None = raw_type
    else:
        exc_type = _EXCEPTION_CODES.get(_text(row, "exception_type").lower())
    if exc_type is None:
        return None
    try:
        date_int = to_date_int(_text(row, "date"))
    except InvalidServiceDate:
        return None
    return CalendarDateException(
        service_id=_text(row, "service_id"), date=date_int, exception_type=exc_type
    )
