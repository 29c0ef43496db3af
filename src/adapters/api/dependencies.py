from __future__ import annotations

import logging
from functools import lru_cache

from src.adapters.persistence.local_gtfs_repository import LocalGtfsRepository
from src.app.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_schedule_service() -> ScheduleService:
    """Process-wide service, loaded from GTFS_PATH on first use.

    A missing feed leaves the service unloaded; schedule endpoints then
    answer 503 until a later reload succeeds.
    """

    service = ScheduleService(gtfs_repository=LocalGtfsRepository())
    try:
        service.reload()
    except FileNotFoundError:
        logger.warning("GTFS feed not found; schedule service starts unloaded")
    return service
