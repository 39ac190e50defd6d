"""Persistent registry of named fields and their last-known coordinates.

Storage: ~/.agrivoice/fields.json (see AgriVoiceConfig.fields_file)
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from agrivoice.location.models import Coordinate, KnownField
from agrivoice.storage import read_items, write_items

logger = logging.getLogger(__name__)


class FieldRegistry:
    """Name -> location mapping with upsert and ordered enumeration.

    Names match exactly (case-sensitive). Updating an existing name keeps
    its position; new names are appended. Nothing is ever pruned.

    Usage:
        registry = FieldRegistry(config.fields_file)
        registry.upsert("North Paddy", Coordinate(latitude=35.0, longitude=139.0))
        for field in registry.all():
            ...

    Pass path=None for a memory-only registry.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._fields: list[KnownField] = []
        self._load()

    def _load(self) -> None:
        if self.path is None:
            return

        for item in read_items(self.path, "fields"):
            try:
                field = KnownField(**item)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping invalid field entry: {e}")
                continue
            self._replace_or_append(field)

    def _save(self) -> None:
        if self.path is None:
            return
        write_items(
            self.path,
            "fields",
            [field.model_dump(mode="json") for field in self._fields],
        )

    def _replace_or_append(self, field: KnownField) -> None:
        for index, existing in enumerate(self._fields):
            if existing.name == field.name:
                self._fields[index] = field
                return
        self._fields.append(field)

    def upsert(self, name: str, location: Coordinate) -> KnownField:
        """Record name at location, replacing any entry with the same name."""
        field = KnownField(name=name, location=location)
        self._replace_or_append(field)
        self._save()
        logger.info(f"Registered field '{name}' at {location.latitude:.6f},{location.longitude:.6f}")
        return field

    def get(self, name: str) -> KnownField | None:
        for field in self._fields:
            if field.name == name:
                return field
        return None

    def all(self) -> list[KnownField]:
        """All fields in insertion order."""
        return list(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
