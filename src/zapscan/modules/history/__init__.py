"""Scan history sink."""

from zapscan.modules.scan.models import HistoryEntry, HistorySink

from .store import DEFAULT_HISTORY_LIMIT, JsonHistoryStore

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "HistoryEntry",
    "HistorySink",
    "JsonHistoryStore",
]
