from __future__ import annotations

import re

from src.domain.models.gtfs import GtfsRoute, GtfsTrip
from src.domain.models.query import SearchResult, SearchResultType, TrainStopRef
from src.domain.models.stop import Stop
from src.domain.models.store import RecordStore

MAX_SEARCH_RESULTS = 20
MAX_TRAIN_NUMBER_RESULTS = 5
MAX_STATION_RESULTS = 10

_AMT_PREFIX = re.compile(r"^amt\s*", re.IGNORECASE)
_GLUED_TRAIN_NUMBER = re.compile(r"[a-z]\s*(\d{1,4})$", re.IGNORECASE)
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def extract_train_number(query: str) -> str | None:
    """Guess the train number a query refers to.

    Tried in order: 'amt1234' / 'AMT 1234', a bare '1234', and a number glued
    to a name such as 'Cardinal51'.
    """

    q = query.strip()
    if not q:
        return None

    stripped = _AMT_PREFIX.sub("", q, count=1).strip()
    if stripped != q and stripped.isdigit():
        return stripped
    if q.isdigit():
        return q
    m = _GLUED_TRAIN_NUMBER.search(q)
    if m:
        return m.group(1)
    return None


def _station_results(store: RecordStore, query: str, q: str) -> list[SearchResult]:
    out: list[SearchResult] = []
    for stop in store.stops_by_id.values():
        if q in stop.name.lower():
            out.append(
                SearchResult(
                    id=f"stop-name-{stop.stop_id}",
                    name=stop.name,
                    subtitle=f'station name matches "{query}"',
                    type=SearchResultType.STATION,
                    data=stop,
                )
            )
        elif q in stop.stop_id.lower():
            out.append(
                SearchResult(
                    id=f"stop-id-{stop.stop_id}",
                    name=stop.name,
                    subtitle=f'station abbreviation matches "{stop.stop_id}"',
                    type=SearchResultType.STATION,
                    data=stop,
                )
            )
    return out


def _route_matches(route: GtfsRoute, q: str) -> bool:
    return (
        q in route.long_name.lower()
        or (route.short_name is not None and q in route.short_name.lower())
        or q in route.route_id.lower()
    )


def _route_results(store: RecordStore, q: str) -> list[SearchResult]:
    return [
        SearchResult(
            id=f"route-{route.route_id}",
            name=route.long_name or route.short_name or route.route_id,
            subtitle=f"AMT{route.route_id}",
            type=SearchResultType.ROUTE,
            data=route,
        )
        for route in store.routes_by_id.values()
        if _route_matches(route, q)
    ]


def _train_name(store: RecordStore, trip: GtfsTrip) -> str:
    route = store.routes_by_id.get(trip.route_id)
    if route is not None and route.long_name:
        return f"{route.long_name} {trip.short_name}"
    return f"Train {trip.short_name}"


def _train_number_results(store: RecordStore, number: str) -> list[SearchResult]:
    out: list[SearchResult] = []
    for trip_id in store.trip_ids_by_short_name.get(number, ())[:MAX_TRAIN_NUMBER_RESULTS]:
        trip = store.trips_by_id.get(trip_id)
        if trip is None:
            continue
        out.append(
            SearchResult(
                id=f"train-{trip.trip_id}",
                name=_train_name(store, trip),
                subtitle=f'train number matches "{number}"',
                type=SearchResultType.TRAIN,
                data=trip,
            )
        )
    return out


def _trip_stop_results(
    store: RecordStore, q: str, number: str | None
) -> list[SearchResult]:
    out: list[SearchResult] = []
    for trip_id, entries in store.stop_times_by_trip.items():
        # Distinct stops in visiting order.
        for stop_id in dict.fromkeys(st.stop_id for st in entries):
            stop = store.stops_by_id.get(stop_id)
            if stop is None or q not in stop.name.lower():
                continue
            out.append(
                SearchResult(
                    id=f"trip-stop-{trip_id}-{stop_id}",
                    name=f"Train {trip_id}",
                    subtitle=f'train stops at "{stop.name}"',
                    type=SearchResultType.TRAIN,
                    data=TrainStopRef(
                        trip_id=trip_id, stop_id=stop_id, stop_name=stop.name
                    ),
                )
            )

        if number is not None:
            m = _TRAILING_DIGITS.search(trip_id)
            if m and m.group(1) == number:
                out.append(
                    SearchResult(
                        id=f"trip-{trip_id}",
                        name=f"Train {trip_id}",
                        subtitle=f'train number matches "{number}"',
                        type=SearchResultType.TRAIN,
                        data=TrainStopRef(trip_id=trip_id),
                    )
                )
    return out


def search(store: RecordStore, query: str) -> tuple[SearchResult, ...]:
    """Free-text lookup across stations, routes and trains.

    Every pass runs and contributes results in a fixed order: station names,
    station codes, routes, train numbers, then trains calling at a matching
    station. Results with a repeated id are dropped (first one wins) and the
    list is capped at MAX_SEARCH_RESULTS.

    Matching uses the query as given, without trimming; an empty query
    matches every station, route and trip stop.
    """

    q = query.lower()
    number = extract_train_number(query)

    results: list[SearchResult] = []
    results.extend(_station_results(store, query, q))
    results.extend(_route_results(store, q))
    if number is not None:
        results.extend(_train_number_results(store, number))
    results.extend(_trip_stop_results(store, q, number))

    seen: set[str] = set()
    out: list[SearchResult] = []
    for r in results:
        if r.id in seen:
            continue
        seen.add(r.id)
        out.append(r)
        if len(out) >= MAX_SEARCH_RESULTS:
            break
    return tuple(out)


def search_stations(store: RecordStore, query: str) -> tuple[Stop, ...]:
    """Stops whose name or code contains the query, in index order."""

    q = query.lower()
    out: list[Stop] = []
    for stop in store.stops_by_id.values():
        if q in stop.name.lower() or q in stop.stop_id.lower():
            out.append(stop)
            if len(out) >= MAX_STATION_RESULTS:
                break
    return tuple(out)
