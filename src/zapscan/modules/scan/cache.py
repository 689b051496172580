"""Process-lifetime memo of completed scan results."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import UTC, datetime

from .models import CacheEntry, Finding, ScanMode, ScanTarget

CacheKey = tuple[str, ScanMode]


class ScanCache:
    """Findings keyed by (canonical target URL, mode).

    Safe for concurrent sessions: writes replace whole entries under a lock,
    so readers see either the previous or the new result set. There is no TTL
    or eviction; entries live as long as the cache object.
    """

    def __init__(self):
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(target: ScanTarget, mode: ScanMode) -> CacheKey:
        return (target.url, ScanMode(mode))

    def get(self, target: ScanTarget, mode: ScanMode) -> list[Finding] | None:
        with self._lock:
            entry = self._entries.get(self.key(target, mode))
        if entry is None:
            return None
        return list(entry.findings)

    def entry(self, target: ScanTarget, mode: ScanMode) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(self.key(target, mode))

    def put(self, target: ScanTarget, mode: ScanMode, findings: Iterable[Finding]) -> None:
        entry = CacheEntry(findings=tuple(findings), stored_at=datetime.now(UTC))
        with self._lock:
            self._entries[self.key(target, mode)] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_default_cache: ScanCache | None = None
_default_lock = threading.Lock()


def get_default_cache() -> ScanCache:
    """Return the process-scoped cache shared by default orchestrators."""
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = ScanCache()
        return _default_cache
