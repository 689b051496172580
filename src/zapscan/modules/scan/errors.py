"""Error taxonomy for scan runs and the classifier that maps failures onto it."""

from __future__ import annotations

from enum import Enum

from zapscan.tools.http import TransportError


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    ENGINE_UNREACHABLE = "engine_unreachable"
    SCAN_START = "scan_start"
    SCAN_TIMEOUT = "scan_timeout"
    POLL_TIMEOUT = "poll_timeout"
    CANCELLED = "cancelled"
    RESULT_FETCH = "result_fetch"
    UNKNOWN = "unknown"


class ErrorAudience(str, Enum):
    """Who has to act on an error: whoever set up the engine, the target site, or the operator."""

    CONFIGURATION = "configuration"
    TARGET = "target"
    OPERATOR = "operator"
    UNKNOWN = "unknown"


class ScanError(Exception):
    """Base class for every error surfaced by a scan run."""

    kind = ErrorKind.UNKNOWN
    audience = ErrorAudience.UNKNOWN
    summary = "Security scan failed"

    def __init__(self, detail: str = "", status: int | None = None):
        self.detail = detail
        self.status = status
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        if self.detail:
            return f"{self.summary}: {self.detail}"
        return self.summary


class InvalidUrlError(ScanError):
    kind = ErrorKind.INVALID_URL
    audience = ErrorAudience.TARGET
    summary = "Invalid target URL"


class EngineUnreachableError(ScanError):
    kind = ErrorKind.ENGINE_UNREACHABLE
    audience = ErrorAudience.CONFIGURATION
    summary = "Cannot connect to ZAP API"

    def __init__(self, detail: str = "", status: int | None = None, endpoint: str | None = None):
        self.endpoint = endpoint
        super().__init__(detail, status)

    @property
    def user_message(self) -> str:
        where = f" at {self.endpoint}" if self.endpoint else ""
        hint = (
            "Ensure ZAP is running, the API is enabled, the API key matches, "
            "and the relay allows your origin."
        )
        message = f"{self.summary}{where}. {hint}"
        if self.detail:
            message = f"{message} ({self.detail})"
        return message


class ScanStartError(ScanError):
    kind = ErrorKind.SCAN_START
    audience = ErrorAudience.TARGET
    summary = "Failed to start scan"


class PollTimeoutError(ScanError):
    kind = ErrorKind.POLL_TIMEOUT
    audience = ErrorAudience.TARGET
    summary = "Timed out waiting for the engine"

    def __init__(self, attempts: int, detail: str = ""):
        self.attempts = attempts
        super().__init__(detail or f"no completion after {attempts} attempts")


class ScanTimeoutError(PollTimeoutError):
    kind = ErrorKind.SCAN_TIMEOUT
    summary = "Active scan timed out"


class ScanCancelledError(ScanError):
    kind = ErrorKind.CANCELLED
    audience = ErrorAudience.OPERATOR
    summary = "Scan was cancelled"


class ResultFetchError(ScanError):
    kind = ErrorKind.RESULT_FETCH
    audience = ErrorAudience.TARGET
    summary = "Failed to fetch scan results"


class UnknownError(ScanError):
    kind = ErrorKind.UNKNOWN
    audience = ErrorAudience.UNKNOWN
    summary = "Security scan failed"


def describe_transport_error(error: TransportError) -> str:
    """Return the most specific diagnostic a transport failure carries."""
    return error.diagnostic


def classify_error(exc: BaseException, endpoint: str | None = None) -> ScanError:
    """Map any failure raised during a run onto the scan error taxonomy."""
    if isinstance(exc, ScanError):
        return exc
    if isinstance(exc, TransportError):
        if exc.no_response:
            return EngineUnreachableError(describe_transport_error(exc), endpoint=endpoint)
        return UnknownError(describe_transport_error(exc), status=exc.status)
    message = str(exc) or exc.__class__.__name__
    return UnknownError(message)
