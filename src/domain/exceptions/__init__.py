from .schedule import FeedNotLoaded, InvalidServiceDate, ScheduleError

__all__ = [
    "FeedNotLoaded",
    "InvalidServiceDate",
    "ScheduleError",
]
