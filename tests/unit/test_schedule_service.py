from __future__ import annotations

import threading
from dataclasses import dataclass

import pytest

from src.app.services.schedule_service import UNKNOWN_ROUTE_NAME, ScheduleService
from src.domain.exceptions import FeedNotLoaded
from src.domain.models import FeedSnapshot


@dataclass(slots=True)
class FakeGtfsRepository:
    snapshot: FeedSnapshot
    calls: int = 0

    def load_snapshot(self) -> FeedSnapshot:
        self.calls += 1
        return self.snapshot


def _single_stop_feed(stop_id: str, name: str) -> FeedSnapshot:
    return FeedSnapshot(
        routes=[{"route_id": f"R-{stop_id}", "route_long_name": name}],
        stops=[{"stop_id": stop_id, "stop_name": name, "stop_lat": 0.0, "stop_lon": 0.0}],
        trips=[{"trip_id": f"T-{stop_id}", "route_id": f"R-{stop_id}", "trip_short_name": "1"}],
        stop_times_by_trip={
            f"T-{stop_id}": [
                {"stop_id": stop_id, "stop_sequence": 1, "departure_time": "08:00:00"}
            ]
        },
    )


def test_new_service_is_distinguishably_unloaded() -> None:
    svc = ScheduleService()

    assert svc.is_loaded is False
    assert svc.has_loaded_once is False
    assert svc.last_report is None
    assert svc.status() == (False, None)
    with pytest.raises(FeedNotLoaded):
        svc.require_loaded()


def test_queries_before_first_load_are_empty_not_errors() -> None:
    svc = ScheduleService()

    assert svc.all_routes() == ()
    assert svc.all_stops() == ()
    assert svc.get_stop_times_for_trip("T1") == ()
    assert svc.get_trips_for_stop("A", "2026-10-19") == ()
    assert svc.find_trips_with_stops("A", "B") == ()
    assert svc.search("union") == ()
    assert svc.search_stations("union") == ()
    assert svc.get_shape("SH1") == ()
    # No calendar data has ever been loaded.
    assert svc.is_service_active_on_date("S1", "2026-10-19") is True


def test_load_publishes_store_and_returns_report(feed_snapshot: FeedSnapshot) -> None:
    svc = ScheduleService()

    report = svc.load(feed_snapshot)

    assert report.is_loaded is True
    assert svc.is_loaded is True
    assert svc.has_loaded_once is True
    assert svc.last_report is report
    assert svc.status() == (True, report)
    assert svc.require_loaded().routes_by_id["R1"].long_name == "Cardinal"


def test_lookups_and_display_defaults(feed_snapshot: FeedSnapshot) -> None:
    svc = ScheduleService()
    svc.load(feed_snapshot)

    assert svc.get_route("R1") is not None
    assert svc.get_route("R404") is None
    assert svc.route_name("R2") == "Northeast Regional"
    assert svc.route_name("R404") == UNKNOWN_ROUTE_NAME
    assert svc.stop_name("WAS") == "Washington Union Station"
    assert svc.stop_name("XYZ") == "XYZ"
    assert svc.get_stop("XYZ") is None
    assert svc.get_trip("T171") is not None
    assert svc.train_number("T171") == "171"
    assert svc.route_id_for_trip("T171") == "R2"

    assert [r.route_id for r in svc.all_routes()] == ["R1", "R2"]
    assert len(svc.all_stops()) == 6
    assert svc.all_trip_ids() == ("T50a", "T50b", "T171", "T172", "T1234")
    assert len(svc.all_trips()) == 5


def test_queries_delegate_to_published_store(feed_snapshot: FeedSnapshot) -> None:
    svc = ScheduleService()
    svc.load(feed_snapshot)

    assert [st.stop_id for st in svc.get_stop_times_for_trip("T171")] == ["WAS", "PHL", "NYP"]
    assert [st.stop_id for st in svc.get_intermediate_stops("T171")] == ["PHL"]
    assert svc.get_trips_for_stop("CHI", "2026-10-17") == ("T50b",)
    assert [m.trip_id for m in svc.find_trips_with_stops("CHI", "WAS")] == ["T50a"]
    assert svc.is_service_active_on_date("WKDY", "2026-09-07") is False
    assert svc.search("amt1234")[0].id == "train-T1234"
    assert [s.stop_id for s in svc.search_stations("union")] == ["CHI", "WAS"]
    assert len(svc.get_shape("SH1")) == 2
    assert list(svc.all_shapes()) == ["SH1"]
    assert svc.all_shape_ids() == ("SH1",)


def test_returned_collections_cannot_mutate_the_store(feed_snapshot: FeedSnapshot) -> None:
    svc = ScheduleService()
    svc.load(feed_snapshot)

    with pytest.raises(TypeError):
        svc.all_shapes()["SH2"] = ()  # type: ignore[index]
    with pytest.raises(AttributeError):
        svc.get_shape("SH1").append(None)  # type: ignore[attr-defined]


def test_reload_replaces_the_whole_store() -> None:
    repo = FakeGtfsRepository(_single_stop_feed("OLD", "Old Town"))
    svc = ScheduleService(gtfs_repository=repo)

    svc.reload()
    assert svc.get_stop("OLD") is not None

    repo.snapshot = _single_stop_feed("NEW", "New Town")
    svc.reload()

    assert repo.calls == 2
    assert svc.get_stop("OLD") is None
    assert svc.get_route("R-OLD") is None
    assert svc.get_stop_times_for_trip("T-OLD") == ()
    assert [s.stop_id for s in svc.all_stops()] == ["NEW"]


def test_reload_requires_repository() -> None:
    with pytest.raises(RuntimeError):
        ScheduleService().reload()


def test_loading_an_empty_feed_unloads_the_service(feed_snapshot: FeedSnapshot) -> None:
    svc = ScheduleService()
    svc.load(feed_snapshot)

    report = svc.load(FeedSnapshot())

    assert report.is_loaded is False
    assert svc.is_loaded is False
    assert svc.has_loaded_once is True
    with pytest.raises(FeedNotLoaded):
        svc.require_loaded()


def test_readers_never_observe_a_mixed_store() -> None:
    feeds = [_single_stop_feed("AAA", "Alpha"), _single_stop_feed("BBB", "Bravo")]
    svc = ScheduleService()
    svc.load(feeds[0])

    stop = threading.Event()
    errors: list[str] = []

    def writer() -> None:
        i = 0
        while not stop.is_set():
            i += 1
            svc.load(feeds[i % 2])

    def reader() -> None:
        for _ in range(2000):
            store = svc.require_loaded()
            (stop_id,) = tuple(store.stops_by_id)
            if f"T-{stop_id}" not in store.stop_times_by_trip:
                errors.append(stop_id)

    t = threading.Thread(target=writer)
    t.start()
    try:
        reader()
    finally:
        stop.set()
        t.join()

    assert errors == []


def test_status_pairs_flag_and_report_of_the_same_load() -> None:
    feeds = [_single_stop_feed("AAA", "Alpha"), FeedSnapshot(routes=[{"route_id": ""}])]
    svc = ScheduleService()
    svc.load(feeds[0])

    stop = threading.Event()
    mismatches: list[bool] = []

    def writer() -> None:
        i = 0
        while not stop.is_set():
            i += 1
            svc.load(feeds[i % 2])

    t = threading.Thread(target=writer)
    t.start()
    try:
        for _ in range(2000):
            is_loaded, report = svc.status()
            if report is None or report.is_loaded is not is_loaded:
                mismatches.append(is_loaded)
    finally:
        stop.set()
        t.join()

    assert mismatches == []
