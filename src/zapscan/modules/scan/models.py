"""Data models for scan sessions, findings and progress reporting."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol

SEVERITIES = ("high", "medium", "low")


class ScanMode(str, Enum):
    """Quick scans probe one page; full scans crawl first and recurse."""

    QUICK = "quick"
    FULL = "full"

    @property
    def recurse(self) -> bool:
        return self is ScanMode.FULL

    @property
    def runs_spider(self) -> bool:
        return self is ScanMode.FULL

    @property
    def uses_context(self) -> bool:
        return self is ScanMode.FULL


class PhaseName(str, Enum):
    """Remote scan phases, declared in execution order."""

    SPIDERING = "spidering"
    REGISTERING_CONTEXT = "registering_context"
    ACTIVE_SCANNING = "active_scanning"
    FETCHING_RESULTS = "fetching_results"

    @property
    def order(self) -> int:
        return list(PhaseName).index(self)


class ScanState(str, Enum):
    CONNECTING = "connecting"
    SCANNING = "scanning"
    FETCHING = "fetching"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ScanTarget:
    """Canonical scan target.

    ``url`` is scheme + host + path without query or fragment and is the only
    value used for targeting, result filtering and cache keys. ``display`` keeps
    the query string for messages and URL registration.
    """

    url: str
    display: str

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True, slots=True)
class Finding:
    """Normalized alert returned by the engine."""

    id: str
    title: str
    severity: str
    description: str = ""
    confidence: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.severity,
            "description": self.description,
            "confidence": self.confidence,
            "url": self.url,
        }


@dataclass(frozen=True, slots=True)
class SeverityCounts:
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "SeverityCounts":
        totals = dict.fromkeys(SEVERITIES, 0)
        for finding in findings:
            if finding.severity in totals:
                totals[finding.severity] += 1
        return cls(**totals)

    def to_dict(self) -> dict[str, int]:
        return {"high": self.high, "medium": self.medium, "low": self.low}


@dataclass(frozen=True, slots=True)
class CacheEntry:
    findings: tuple[Finding, ...]
    stored_at: datetime


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Observational progress update; never read back by the orchestrator."""

    state: ScanState
    phase: str
    progress: int
    message: str
    cancellable: bool = True


ProgressCallback = Callable[[ProgressEvent], None]
CancelCheck = Callable[[], bool]


@dataclass
class PhaseState:
    """The single active phase of a session and its remote job."""

    phase: PhaseName
    job_id: str | None = None
    progress: int = 0

    def advance(self, progress: int) -> int:
        """Record a reading, never moving backwards; returns the stored value."""
        self.progress = max(self.progress, min(100, max(0, progress)))
        return self.progress


def _never_cancelled() -> bool:
    return False


@dataclass
class ScanSession:
    """Unit of work for one orchestrator run. Never persisted."""

    target: ScanTarget
    mode: ScanMode
    is_cancelled: CancelCheck = _never_cancelled
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sequence: int = 0
    current: PhaseState | None = None

    @property
    def cancelled(self) -> bool:
        return bool(self.is_cancelled())

    def enter(self, phase: PhaseName, job_id: str | None = None) -> PhaseState:
        """Make ``phase`` the active phase, enforcing strict phase order."""
        if self.current is not None and phase.order <= self.current.phase.order:
            raise RuntimeError(
                f"Phase {phase.value} cannot follow {self.current.phase.value}"
            )
        if phase in (PhaseName.SPIDERING, PhaseName.REGISTERING_CONTEXT) and not (
            self.mode is ScanMode.FULL
        ):
            raise RuntimeError(f"Phase {phase.value} only runs in full mode")
        self.sequence += 1
        self.current = PhaseState(phase=phase, job_id=job_id)
        return self.current


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Flat summary of one completed scan, handed to the history sink."""

    url: str
    timestamp: str
    counts: SeverityCounts

    @property
    def id(self) -> str:
        return f"{self.timestamp}-{self.url}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "timestamp": self.timestamp,
            "counts": self.counts.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        counts = data.get("counts") or {}
        return cls(
            url=str(data.get("url", "")),
            timestamp=str(data.get("timestamp", "")),
            counts=SeverityCounts(
                high=int(counts.get("high", 0) or 0),
                medium=int(counts.get("medium", 0) or 0),
                low=int(counts.get("low", 0) or 0),
            ),
        )


class HistorySink(Protocol):
    """Receiver of completed-scan summaries."""

    def record(self, entry: HistoryEntry) -> None: ...
