from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    """A station as listed in stops.txt. The stop id doubles as station code.

    `location` is None when the feed row has no usable coordinates; such a
    stop still resolves by id and name.
    """

    stop_id: str
    name: str
    location: GeoPoint | None = None

    @property
    def lat(self) -> float | None:
        return self.location.lat if self.location is not None else None

    @property
    def lon(self) -> float | None:
        return self.location.lon if self.location is not None else None
