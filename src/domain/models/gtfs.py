from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

# Raw decoded feed rows use GTFS column names (route_id, stop_name, ...).
FeedRow = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class GtfsRoute:
    route_id: str
    long_name: str
    short_name: str | None = None


@dataclass(frozen=True, slots=True)
class GtfsTrip:
    trip_id: str
    route_id: str
    short_name: str = ""  # train number; shared by runs on different service days
    headsign: str = ""
    service_id: str = ""
    shape_id: str | None = None


@dataclass(frozen=True, slots=True)
class StopTime:
    """One scheduled visit of a trip to a stop.

    Times are kept as the feed's HH:MM:SS text. HH may exceed 23 for stops
    served after midnight of the trip's service day.
    """

    trip_id: str
    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int


@dataclass(frozen=True, slots=True)
class EnrichedStopTime:
    trip_id: str
    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int
    stop_name: str
    stop_code: str

    @classmethod
    def from_stop_time(cls, st: StopTime, *, stop_name: str) -> EnrichedStopTime:
        return cls(
            trip_id=st.trip_id,
            stop_id=st.stop_id,
            arrival_time=st.arrival_time,
            departure_time=st.departure_time,
            stop_sequence=st.stop_sequence,
            stop_name=stop_name,
            stop_code=st.stop_id,
        )


@dataclass(frozen=True, slots=True)
class CalendarEntry:
    """Weekly recurrence of a service between two inclusive YYYYMMDD dates."""

    service_id: str
    start_date: int
    end_date: int
    days: tuple[bool, bool, bool, bool, bool, bool, bool]  # Sunday=0 .. Saturday=6

    def runs_on_weekday(self, weekday: int) -> bool:
        return bool(self.days[weekday])


class ExceptionType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class CalendarDateException:
    service_id: str
    date: int
    exception_type: ExceptionType


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    """A decoded static feed, handed over wholesale to a load.

    Calendar tables default to empty for feeds published without them.
    """

    routes: Sequence[FeedRow] = ()
    stops: Sequence[FeedRow] = ()
    stop_times_by_trip: Mapping[str, Sequence[FeedRow]] = field(default_factory=dict)
    shapes: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    trips: Sequence[FeedRow] = ()
    calendar: Sequence[FeedRow] = ()
    calendar_dates: Sequence[FeedRow | CalendarDateException] = ()
