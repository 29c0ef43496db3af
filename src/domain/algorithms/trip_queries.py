from __future__ import annotations

from typing import Iterator

from src.domain.algorithms.service_calendar import is_service_active
from src.domain.algorithms.time_utils import ServiceDate, gtfs_time_to_seconds
from src.domain.models.gtfs import EnrichedStopTime, StopTime
from src.domain.models.query import TripMatch
from src.domain.models.store import RecordStore


def stop_display_name(store: RecordStore, stop_id: str) -> str:
    stop = store.stops_by_id.get(stop_id)
    return stop.name if stop is not None and stop.name else stop_id


def _enrich(store: RecordStore, st: StopTime) -> EnrichedStopTime:
    return EnrichedStopTime.from_stop_time(
        st, stop_name=stop_display_name(store, st.stop_id)
    )


def stop_times_for_trip(store: RecordStore, trip_id: str) -> tuple[EnrichedStopTime, ...]:
    """All stop times of a trip in stop_sequence order, with stop names."""

    entries = store.stop_times_by_trip.get(trip_id, ())
    return tuple(_enrich(store, st) for st in entries)


def intermediate_stops(store: RecordStore, trip_id: str) -> tuple[EnrichedStopTime, ...]:
    """Stops along the way, i.e. without origin and terminus."""

    return stop_times_for_trip(store, trip_id)[1:-1]


def _service_id_for_trip(store: RecordStore, trip_id: str) -> str:
    trip = store.trips_by_id.get(trip_id)
    return trip.service_id if trip is not None else ""


def _candidate_trips(
    store: RecordStore, on: ServiceDate | None
) -> Iterator[tuple[str, tuple[StopTime, ...]]]:
    for trip_id, entries in store.stop_times_by_trip.items():
        if on is not None and not is_service_active(
            store, _service_id_for_trip(store, trip_id), on
        ):
            continue
        yield trip_id, entries


def trips_at_stop(
    store: RecordStore, stop_id: str, on: ServiceDate | None = None
) -> tuple[str, ...]:
    """Trip ids serving stop_id, optionally only those running on a date."""

    out: list[str] = []
    for trip_id, entries in _candidate_trips(store, on):
        if any(st.stop_id == stop_id for st in entries):
            out.append(trip_id)
    return tuple(out)


def _first_index(entries: tuple[StopTime, ...], stop_id: str) -> int | None:
    for i, st in enumerate(entries):
        if st.stop_id == stop_id:
            return i
    return None


def _departure_sort_key(st: EnrichedStopTime) -> tuple[int, str]:
    # Unparseable times sort after every valid one, then by their text.
    seconds = gtfs_time_to_seconds(st.departure_time)
    return (seconds if seconds is not None else 2**31 - 1, st.departure_time)


def trips_connecting(
    store: RecordStore,
    from_stop_id: str,
    to_stop_id: str,
    on: ServiceDate | None = None,
) -> tuple[TripMatch, ...]:
    """Trips that call at from_stop_id and later at to_stop_id.

    Only the first visit to each stop is considered, and the origin must come
    first in stop_sequence order. Results are ordered by departure from the
    origin. Trips sharing a train number and origin departure time are the
    same scheduled run on different service calendars; only the first is kept.
    """

    matches: list[TripMatch] = []
    for trip_id, entries in _candidate_trips(store, on):
        i_from = _first_index(entries, from_stop_id)
        i_to = _first_index(entries, to_stop_id)
        if i_from is None or i_to is None or i_from >= i_to:
            continue

        matches.append(
            TripMatch(
                trip_id=trip_id,
                from_stop=_enrich(store, entries[i_from]),
                to_stop=_enrich(store, entries[i_to]),
                intermediate_stops=tuple(
                    _enrich(store, st) for st in entries[i_from + 1 : i_to]
                ),
            )
        )

    matches.sort(key=lambda m: _departure_sort_key(m.from_stop))

    seen: set[tuple[str, str]] = set()
    out: list[TripMatch] = []
    for m in matches:
        trip = store.trips_by_id.get(m.trip_id)
        # Without a train number the trip id is the only identity we have.
        run = trip.short_name if trip is not None and trip.short_name else m.trip_id
        key = (run, m.from_stop.departure_time)
        if key in seen:
            continue
        seen.add(key)
        out.append(m)
    return tuple(out)


def train_number(store: RecordStore, trip_id: str) -> str | None:
    trip = store.trips_by_id.get(trip_id)
    if trip is None or not trip.short_name:
        return None
    return trip.short_name


def route_id_for_trip(store: RecordStore, trip_id: str) -> str | None:
    trip = store.trips_by_id.get(trip_id)
    if trip is None or not trip.route_id:
        return None
    return trip.route_id
