class ScheduleError(Exception):
    """Base exception for schedule index failures."""


class FeedNotLoaded(ScheduleError):
    """Raised when a caller requires a feed before any load has completed."""


class InvalidServiceDate(ScheduleError, ValueError):
    """Raised when a caller-supplied date cannot be read as a calendar date."""
