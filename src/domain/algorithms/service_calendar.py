from __future__ import annotations

from src.domain.algorithms.time_utils import (
    ServiceDate,
    to_date_int,
    weekday_sunday_first,
)
from src.domain.models.gtfs import ExceptionType
from src.domain.models.store import RecordStore


def is_service_active(store: RecordStore, service_id: str, on: ServiceDate) -> bool:
    """Decide whether a service operates on a calendar date.

    Order of precedence:
        - feeds without any calendar data treat every service as running
        - a per-date exception (added/removed) overrides the weekly pattern
        - a service without a calendar entry only runs on added dates
        - otherwise the weekly pattern applies within [start_date, end_date]
    """

    if not store.has_calendar_data:
        return True
    if not service_id:
        return True

    date_int = to_date_int(on)

    exceptions = store.exceptions_by_service.get(service_id)
    if exceptions:
        exc_type = exceptions.get(date_int)
        if exc_type is ExceptionType.ADDED:
            return True
        if exc_type is ExceptionType.REMOVED:
            return False

    entry = store.calendar_by_service.get(service_id)
    if entry is None:
        return False
    if not (entry.start_date <= date_int <= entry.end_date):
        return False
    return entry.runs_on_weekday(weekday_sunday_first(date_int))
