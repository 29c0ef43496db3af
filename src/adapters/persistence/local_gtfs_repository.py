from __future__ import annotations

import csv
import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IGtfsRepository
from src.domain.models.gtfs import FeedRow, FeedSnapshot


def _read_rows(path: Path) -> list[dict[str, str]]:
    # utf-8-sig: several agencies publish their .txt files with a BOM.
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        return list(csv.DictReader(fp))


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Decodes a GTFS feed from a directory of .txt files.

    stops.txt and stop_times.txt are required; routes, trips, shapes,
    calendar and calendar_dates are read when present.

    Env vars:
      - GTFS_PATH: path to the feed directory (default data/gtfs)
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def _optional(self, name: str) -> list[dict[str, str]]:
        path = self._base() / name
        if not path.exists():
            return []
        return _read_rows(path)

    def load_snapshot(self) -> FeedSnapshot:
        base = self._base()

        stops = _read_rows(base / "stops.txt")

        # Rows stay grouped per trip; ordering by stop_sequence happens at index time.
        stop_times_by_trip: dict[str, list[FeedRow]] = {}
        for row in _read_rows(base / "stop_times.txt"):
            trip_id = (row.get("trip_id") or "").strip()
            stop_times_by_trip.setdefault(trip_id, []).append(row)

        shapes: dict[str, list[FeedRow]] = {}
        for row in self._optional("shapes.txt"):
            shape_id = (row.get("shape_id") or "").strip()
            shapes.setdefault(shape_id, []).append(row)

        return FeedSnapshot(
            routes=self._optional("routes.txt"),
            stops=stops,
            stop_times_by_trip=stop_times_by_trip,
            shapes=shapes,
            trips=self._optional("trips.txt"),
            calendar=self._optional("calendar.txt"),
            calendar_dates=self._optional("calendar_dates.txt"),
        )
