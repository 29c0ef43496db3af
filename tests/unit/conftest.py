from __future__ import annotations

import pytest

from src.domain.algorithms.indexing import build_record_store
from src.domain.models import FeedSnapshot, RecordStore


def _st(stop_id: str, seq: int, arr: str, dep: str) -> dict[str, object]:
    return {
        "stop_id": stop_id,
        "stop_sequence": seq,
        "arrival_time": arr,
        "departure_time": dep,
    }


def _cardinal_stop_times() -> list[dict[str, object]]:
    # Deliberately not in sequence order.
    return [
        _st("CVS", 3, "33:00:00", "33:05:00"),
        _st("CHI", 1, "17:45:00", "17:45:00"),
        _st("WAS", 4, "37:30:00", "38:00:00"),
        _st("CIN", 2, "25:15:00", "25:27:00"),
    ]


def build_feed_snapshot() -> FeedSnapshot:
    """Small two-route feed with weekday/weekend calendars.

    2026-10-19 is a Monday, 2026-10-17 a Saturday, 2026-09-07 (Labor Day) a
    Monday on which the weekday service is swapped for the weekend one.
    """

    return FeedSnapshot(
        routes=[
            {"route_id": "R1", "route_long_name": "Cardinal"},
            {
                "route_id": "R2",
                "route_long_name": "Northeast Regional",
                "route_short_name": "NER",
            },
        ],
        stops=[
            {"stop_id": "CHI", "stop_name": "Chicago Union Station", "stop_lat": 41.8781, "stop_lon": -87.6396},
            {"stop_id": "CIN", "stop_name": "Cincinnati", "stop_lat": 39.1097, "stop_lon": -84.5374},
            {"stop_id": "CVS", "stop_name": "Charlottesville", "stop_lat": 38.0317, "stop_lon": -78.4922},
            {"stop_id": "WAS", "stop_name": "Washington Union Station", "stop_lat": 38.8977, "stop_lon": -77.0068},
            {"stop_id": "PHL", "stop_name": "Philadelphia 30th Street", "stop_lat": 39.9569, "stop_lon": -75.1819},
            {"stop_id": "NYP", "stop_name": "New York Penn Station", "stop_lat": 40.7509, "stop_lon": -73.9937},
        ],
        trips=[
            {"trip_id": "T50a", "route_id": "R1", "trip_short_name": "50", "trip_headsign": "New York", "service_id": "WKDY", "shape_id": "SH1"},
            {"trip_id": "T50b", "route_id": "R1", "trip_short_name": "50", "trip_headsign": "New York", "service_id": "WKND", "shape_id": "SH1"},
            {"trip_id": "T171", "route_id": "R2", "trip_short_name": "171", "trip_headsign": "Boston", "service_id": "DAILY"},
            {"trip_id": "T172", "route_id": "R2", "trip_short_name": "172", "trip_headsign": "Washington", "service_id": "DAILY"},
            {"trip_id": "T1234", "route_id": "R2", "trip_short_name": "1234", "trip_headsign": "Philadelphia", "service_id": "WKDY"},
        ],
        stop_times_by_trip={
            "T50a": _cardinal_stop_times(),
            "T50b": _cardinal_stop_times(),
            "T171": [
                _st("WAS", 1, "06:00:00", "06:00:00"),
                _st("PHL", 2, "07:55:00", "08:00:00"),
                _st("NYP", 3, "09:20:00", "09:20:00"),
            ],
            "T172": [
                _st("NYP", 1, "14:00:00", "14:00:00"),
                _st("PHL", 2, "15:20:00", "15:25:00"),
                _st("WAS", 3, "17:20:00", "17:20:00"),
            ],
            "T1234": [
                _st("NYP", 1, "10:00:00", "10:00:00"),
                _st("PHL", 2, "11:25:00", "11:25:00"),
            ],
        },
        shapes={
            "SH1": [
                {"shape_pt_lat": 41.8781, "shape_pt_lon": -87.6396, "shape_pt_sequence": 1},
                {"shape_pt_lat": 38.8977, "shape_pt_lon": -77.0068, "shape_pt_sequence": 2},
            ]
        },
        calendar=[
            {"service_id": "WKDY", "start_date": "20260101", "end_date": "20261231",
             "monday": "1", "tuesday": "1", "wednesday": "1", "thursday": "1", "friday": "1",
             "saturday": "0", "sunday": "0"},
            {"service_id": "WKND", "start_date": "20260101", "end_date": "20261231",
             "monday": "0", "tuesday": "0", "wednesday": "0", "thursday": "0", "friday": "0",
             "saturday": "1", "sunday": "1"},
            {"service_id": "DAILY", "start_date": "20260101", "end_date": "20261231",
             "monday": "1", "tuesday": "1", "wednesday": "1", "thursday": "1", "friday": "1",
             "saturday": "1", "sunday": "1"},
        ],
        calendar_dates=[
            {"service_id": "WKDY", "date": "20260907", "exception_type": "2"},
            {"service_id": "WKND", "date": "20260907", "exception_type": "1"},
        ],
    )


@pytest.fixture
def feed_snapshot() -> FeedSnapshot:
    return build_feed_snapshot()


@pytest.fixture
def store(feed_snapshot: FeedSnapshot) -> RecordStore:
    built, _ = build_record_store(feed_snapshot)
    return built
