"""Append-only, capped scan history kept in a local JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from zapscan.modules.scan.models import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class JsonHistoryStore:
    """Newest-first history capped at ``limit`` entries."""

    def __init__(self, path: Path, limit: int = DEFAULT_HISTORY_LIMIT):
        self.path = path
        self.limit = limit

    def load(self) -> list[HistoryEntry]:
        """Get recorded entries; unreadable history loads as empty."""
        if not self.path.exists():
            return []
        try:
            with self.path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError):
            logger.warning("Failed to read scan history from %s", self.path, exc_info=True)
            return []
        if not isinstance(data, list):
            return []
        return [HistoryEntry.from_dict(item) for item in data if isinstance(item, dict)]

    def save(self, entries: list[HistoryEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump([entry.to_dict() for entry in entries], handle, indent=2)

    def record(self, entry: HistoryEntry) -> None:
        entries = [entry, *self.load()][: self.limit]
        self.save(entries)
