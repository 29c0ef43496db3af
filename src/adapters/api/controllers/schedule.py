from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_schedule_service
from src.adapters.api.schemas.schedule import (
    GeoPointSchema,
    LoadReportSchema,
    RouteSchema,
    ScheduleStatusSchema,
    SearchResultSchema,
    ServiceActiveSchema,
    ShapeSchema,
    StopSchema,
    StopTimeSchema,
    TripMatchSchema,
    TripSchema,
)
from src.app.services.schedule_service import ScheduleService
from src.domain.algorithms.time_utils import to_date_int
from src.domain.models import EnrichedStopTime, Stop

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _loaded_service(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleService:
    service.require_loaded()
    return service


def _stop_to_schema(stop: Stop) -> StopSchema:
    return StopSchema(
        stop_id=stop.stop_id,
        name=stop.name,
        location=(
            GeoPointSchema(lat=stop.location.lat, lon=stop.location.lon)
            if stop.location is not None
            else None
        ),
    )


def _stop_time_to_schema(st: EnrichedStopTime) -> StopTimeSchema:
    return StopTimeSchema(
        trip_id=st.trip_id,
        stop_id=st.stop_id,
        stop_name=st.stop_name,
        stop_code=st.stop_code,
        arrival_time=st.arrival_time,
        departure_time=st.departure_time,
        stop_sequence=st.stop_sequence,
    )


@router.get("/status", response_model=ScheduleStatusSchema)
def get_status(
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleStatusSchema:
    is_loaded, report = service.status()
    return ScheduleStatusSchema(
        is_loaded=is_loaded,
        last_load=(
            LoadReportSchema(
                loaded=dict(report.loaded),
                skipped=dict(report.skipped),
                has_calendar_data=report.has_calendar_data,
            )
            if report is not None
            else None
        ),
    )


@router.get("/routes", response_model=list[RouteSchema])
def list_routes(
    service: ScheduleService = Depends(_loaded_service),
) -> list[RouteSchema]:
    return [
        RouteSchema(
            route_id=r.route_id, long_name=r.long_name, short_name=r.short_name
        )
        for r in service.all_routes()
    ]


@router.get("/stops", response_model=list[StopSchema])
def list_stops(
    service: ScheduleService = Depends(_loaded_service),
) -> list[StopSchema]:
    return [_stop_to_schema(s) for s in service.all_stops()]


@router.get("/trips/{trip_id}", response_model=TripSchema)
def get_trip(
    trip_id: str,
    service: ScheduleService = Depends(_loaded_service),
) -> TripSchema:
    trip = service.get_trip(trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return TripSchema(
        trip_id=trip.trip_id,
        route_id=trip.route_id,
        route_name=service.route_name(trip.route_id),
        short_name=trip.short_name,
        headsign=trip.headsign,
        service_id=trip.service_id,
        shape_id=trip.shape_id,
    )


@router.get("/trips/{trip_id}/stop-times", response_model=list[StopTimeSchema])
def get_stop_times(
    trip_id: str,
    service: ScheduleService = Depends(_loaded_service),
) -> list[StopTimeSchema]:
    return [_stop_time_to_schema(st) for st in service.get_stop_times_for_trip(trip_id)]


@router.get(
    "/trips/{trip_id}/intermediate-stops", response_model=list[StopTimeSchema]
)
def get_intermediate_stops(
    trip_id: str,
    service: ScheduleService = Depends(_loaded_service),
) -> list[StopTimeSchema]:
    return [_stop_time_to_schema(st) for st in service.get_intermediate_stops(trip_id)]


@router.get("/stops/{stop_id}/trips", response_model=list[str])
def get_trips_for_stop(
    stop_id: str,
    date: str | None = Query(default=None),
    service: ScheduleService = Depends(_loaded_service),
) -> list[str]:
    on = to_date_int(date) if date else None
    return list(service.get_trips_for_stop(stop_id, on))


@router.get("/connections", response_model=list[TripMatchSchema])
def find_connections(
    from_stop_id: str,
    to_stop_id: str,
    date: str | None = Query(default=None),
    service: ScheduleService = Depends(_loaded_service),
) -> list[TripMatchSchema]:
    on = to_date_int(date) if date else None
    return [
        TripMatchSchema(
            trip_id=m.trip_id,
            train_number=service.train_number(m.trip_id),
            from_stop=_stop_time_to_schema(m.from_stop),
            to_stop=_stop_time_to_schema(m.to_stop),
            intermediate_stops=[
                _stop_time_to_schema(st) for st in m.intermediate_stops
            ],
        )
        for m in service.find_trips_with_stops(from_stop_id, to_stop_id, on)
    ]


@router.get("/services/{service_id}/active", response_model=ServiceActiveSchema)
def get_service_active(
    service_id: str,
    date: str,
    service: ScheduleService = Depends(_loaded_service),
) -> ServiceActiveSchema:
    on = to_date_int(date)
    return ServiceActiveSchema(
        service_id=service_id,
        date=on,
        active=service.is_service_active_on_date(service_id, on),
    )


@router.get("/search", response_model=list[SearchResultSchema])
def search(
    q: str = Query(..., min_length=1),
    service: ScheduleService = Depends(_loaded_service),
) -> list[SearchResultSchema]:
    return [
        SearchResultSchema(
            id=r.id,
            name=r.name,
            subtitle=r.subtitle,
            type=r.type.value,
            data=asdict(r.data),
        )
        for r in service.search(q)
    ]


@router.get("/stations", response_model=list[StopSchema])
def search_stations(
    q: str = Query(..., min_length=1),
    service: ScheduleService = Depends(_loaded_service),
) -> list[StopSchema]:
    return [_stop_to_schema(s) for s in service.search_stations(q)]


@router.get("/shapes/{shape_id}", response_model=ShapeSchema)
def get_shape(
    shape_id: str,
    service: ScheduleService = Depends(_loaded_service),
) -> ShapeSchema:
    return ShapeSchema(
        shape_id=shape_id,
        points=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in service.get_shape(shape_id)],
    )
