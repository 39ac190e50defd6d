"""Small JSON document store shared by the field registry and location history.

Documents look like:
    {"version": "1.0", "updated_at": "...", "<key>": [ ... ]}

Writes go to a temporary file under a file lock and are renamed into place.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from agrivoice.config import _file_lock

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"


def _lock_name(path: Path) -> str:
    return "".join(c if c.isalnum() or c in "_-" else "_" for c in path.stem) or "store"


def read_items(path: Path, key: str) -> list[dict[str, Any]]:
    """Load the item list stored under key, or [] if missing or unreadable."""
    if not path.exists():
        return []

    try:
        with _file_lock(_lock_name(path), path.parent / "locks"):
            data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.error(f"Failed to load {path}: {e}")
        return []

    items = data.get(key, []) if isinstance(data, dict) else []
    if not isinstance(items, list):
        logger.error(f"Malformed '{key}' in {path}")
        return []
    return items


def write_items(path: Path, key: str, items: list[dict[str, Any]]) -> None:
    """Atomically replace the document at path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "version": DOCUMENT_VERSION,
        "updated_at": datetime.now().isoformat(),
        key: items,
    }

    with _file_lock(_lock_name(path), path.parent / "locks"):
        temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Restrictive permissions
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
