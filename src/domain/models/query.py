from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .gtfs import EnrichedStopTime, GtfsRoute, GtfsTrip
from .stop import Stop


@dataclass(frozen=True, slots=True)
class TripMatch:
    """A trip that serves from_stop and, later in its sequence, to_stop."""

    trip_id: str
    from_stop: EnrichedStopTime
    to_stop: EnrichedStopTime
    intermediate_stops: tuple[EnrichedStopTime, ...] = ()


class SearchResultType(str, Enum):
    STATION = "station"
    ROUTE = "route"
    TRAIN = "train"


@dataclass(frozen=True, slots=True)
class TrainStopRef:
    trip_id: str
    stop_id: str | None = None
    stop_name: str | None = None


SearchPayload = Union[Stop, GtfsRoute, GtfsTrip, TrainStopRef]


@dataclass(frozen=True, slots=True)
class SearchResult:
    id: str
    name: str
    subtitle: str
    type: SearchResultType
    data: SearchPayload
