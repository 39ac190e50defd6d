"""Bounded history of where work was recorded."""

import logging
from pathlib import Path

from pydantic import ValidationError

from agrivoice.location.models import Coordinate, LocationRecord, LocationStatistics
from agrivoice.storage import read_items, write_items

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class LocationHistory:
    """Keep the most recent `limit` work locations.

    Storage: ~/.agrivoice/location_history.json (see AgriVoiceConfig.history_file)
    """

    def __init__(self, path: Path | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1: {limit}")
        self.path = path
        self.limit = limit
        self._records: list[LocationRecord] = []
        if path is not None:
            for item in read_items(path, "records"):
                try:
                    self._records.append(LocationRecord(**item))
                except (ValidationError, TypeError) as e:
                    logger.warning(f"Skipping invalid history record: {e}")
            self._records = self._records[-limit:]

    def record(self, location: Coordinate, work_type: str | None = None) -> LocationRecord:
        """Append a record, dropping the oldest beyond the limit."""
        entry = LocationRecord(location=location, work_type=work_type)
        self._records.append(entry)
        if len(self._records) > self.limit:
            del self._records[: len(self._records) - self.limit]

        if self.path is not None:
            write_items(self.path, "records", [r.model_dump(mode="json") for r in self._records])
        return entry

    def entries(self) -> list[LocationRecord]:
        return list(self._records)

    def statistics(self) -> LocationStatistics:
        """Counts, work types grouped by ~10 m grid cell, and mean accuracy."""
        if not self._records:
            return LocationStatistics()

        by_location: dict[str, list[str | None]] = {}
        total_accuracy = 0.0
        for entry in self._records:
            loc = entry.location
            total_accuracy += loc.accuracy_meters or 0.0
            key = f"{loc.latitude:.4f},{loc.longitude:.4f}"
            by_location.setdefault(key, []).append(entry.work_type)

        return LocationStatistics(
            total_records=len(self._records),
            work_types_by_location=by_location,
            average_accuracy=total_accuracy / len(self._records),
        )
