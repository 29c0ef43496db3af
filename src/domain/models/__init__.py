from .geo import GeoPoint
from .gtfs import (
    CalendarDateException,
    CalendarEntry,
    EnrichedStopTime,
    ExceptionType,
    FeedSnapshot,
    GtfsRoute,
    GtfsTrip,
    StopTime,
)
from .query import SearchResult, SearchResultType, TrainStopRef, TripMatch
from .stop import Stop
from .store import EMPTY_RECORD_STORE, LoadReport, RecordStore

__all__ = [
    "CalendarDateException",
    "CalendarEntry",
    "EMPTY_RECORD_STORE",
    "EnrichedStopTime",
    "ExceptionType",
    "FeedSnapshot",
    "GeoPoint",
    "GtfsRoute",
    "GtfsTrip",
    "LoadReport",
    "RecordStore",
    "SearchResult",
    "SearchResultType",
    "Stop",
    "StopTime",
    "TrainStopRef",
    "TripMatch",
]
