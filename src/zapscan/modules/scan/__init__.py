"""ZAP scan orchestration: phases, polling, results, cache and error taxonomy."""

from .cache import ScanCache, get_default_cache
from .context import ContextRegistrar, ContextRegistration
from .errors import (
    EngineUnreachableError,
    ErrorAudience,
    ErrorKind,
    InvalidUrlError,
    PollTimeoutError,
    ResultFetchError,
    ScanCancelledError,
    ScanError,
    ScanStartError,
    ScanTimeoutError,
    UnknownError,
    classify_error,
)
from .models import (
    Finding,
    HistoryEntry,
    HistorySink,
    PhaseName,
    PhaseState,
    ProgressEvent,
    ScanMode,
    ScanSession,
    ScanState,
    ScanTarget,
    SeverityCounts,
)
from .orchestrator import CancellationToken, ScanOrchestrator, run_security_scan
from .phases import PhaseRunner
from .poller import StatusReading, poll_until_complete
from .probe import probe_engine
from .results import ResultFetcher, map_alert
from .target import normalize_target

__all__ = [
    "CancellationToken",
    "ContextRegistrar",
    "ContextRegistration",
    "EngineUnreachableError",
    "ErrorAudience",
    "ErrorKind",
    "Finding",
    "HistoryEntry",
    "HistorySink",
    "InvalidUrlError",
    "PhaseName",
    "PhaseRunner",
    "PhaseState",
    "PollTimeoutError",
    "ProgressEvent",
    "ResultFetchError",
    "ResultFetcher",
    "ScanCache",
    "ScanCancelledError",
    "ScanError",
    "ScanMode",
    "ScanOrchestrator",
    "ScanSession",
    "ScanStartError",
    "ScanState",
    "ScanTarget",
    "ScanTimeoutError",
    "SeverityCounts",
    "StatusReading",
    "UnknownError",
    "classify_error",
    "get_default_cache",
    "map_alert",
    "normalize_target",
    "poll_until_complete",
    "probe_engine",
    "run_security_scan",
]
