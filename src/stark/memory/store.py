"""JSON document store — one file per logical table.

Reads never fail: a missing or corrupt document yields the caller's default.
Writes never raise: errors are logged and the in-memory state stays
authoritative until the next successful save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonStore:
    """Load/save whole JSON documents under a single data directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, table: str) -> Path:
        return self.root / f"{table}.json"

    def load(self, table: str, default: Any) -> Any:
        """Return the parsed document for *table*, or *default* if absent/corrupt.

        A document whose top-level type differs from *default*'s counts as corrupt.
        """
        path = self.path(table)
        if not path.exists():
            return default
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", path, e)
            return default
        if default is not None and not isinstance(data, type(default)):
            logger.error(
                "Error loading %s: expected %s, got %s",
                path,
                type(default).__name__,
                type(data).__name__,
            )
            return default
        return data

    def save(self, table: str, data: Any) -> None:
        """Overwrite the document for *table*. Errors are logged, not raised."""
        path = self.path(table)
        try:
            path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving %s: %s", path, e)
