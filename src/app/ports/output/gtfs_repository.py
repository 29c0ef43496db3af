from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.gtfs import FeedSnapshot


class IGtfsRepository(ABC):
    """Port for obtaining a decoded static GTFS feed."""

    @abstractmethod
    def load_snapshot(self) -> FeedSnapshot:
        raise NotImplementedError
