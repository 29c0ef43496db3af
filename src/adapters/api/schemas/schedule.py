from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class RouteSchema(BaseModel):
    route_id: str
    long_name: str
    short_name: str | None = None


class StopSchema(BaseModel):
    stop_id: str
    name: str
    location: GeoPointSchema | None = None


class TripSchema(BaseModel):
    trip_id: str
    route_id: str
    route_name: str
    short_name: str = ""
    headsign: str = ""
    service_id: str = ""
    shape_id: str | None = None


class StopTimeSchema(BaseModel):
    trip_id: str
    stop_id: str
    stop_name: str
    stop_code: str
    arrival_time: str
    departure_time: str
    stop_sequence: int


class TripMatchSchema(BaseModel):
    trip_id: str
    train_number: str | None = None
    from_stop: StopTimeSchema
    to_stop: StopTimeSchema
    intermediate_stops: list[StopTimeSchema] = []


class SearchResultSchema(BaseModel):
    id: str
    name: str
    subtitle: str
    type: Literal["station", "route", "train"]
    data: dict[str, Any]


class ServiceActiveSchema(BaseModel):
    service_id: str
    date: int
    active: bool


class ShapeSchema(BaseModel):
    shape_id: str
    points: list[GeoPointSchema]


class LoadReportSchema(BaseModel):
    loaded: dict[str, int] = {}
    skipped: dict[str, int] = {}
    has_calendar_data: bool = False


class ScheduleStatusSchema(BaseModel):
    is_loaded: bool
    last_load: LoadReportSchema | None = None
