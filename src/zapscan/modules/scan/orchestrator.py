"""Top-level scan state machine: normalize, cache, probe, phases, results."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from zapscan.config import ScanSettings
from zapscan.tools.http import ZapClient

from .cache import ScanCache, get_default_cache
from .errors import ScanCancelledError, ScanError, classify_error
from .models import (
    CancelCheck,
    Finding,
    HistoryEntry,
    HistorySink,
    PhaseName,
    ProgressCallback,
    ProgressEvent,
    ScanMode,
    ScanSession,
    ScanState,
    SeverityCounts,
)
from .phases import PhaseRunner
from .poller import SleepFn
from .probe import probe_engine
from .results import ResultFetcher
from .target import normalize_target

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ScanSettings], ZapClient]


def client_from_settings(settings: ScanSettings) -> ZapClient:
    """Build the transport client described by ``settings``."""
    return ZapClient(
        base_url=settings.proxy_url,
        path_prefix=settings.path_prefix,
        api_key=settings.api_key,
        timeout=settings.request_timeout,
    )


class CancellationToken:
    """Caller-owned cancel flag, read cooperatively at suspension points."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self.is_cancelled()


def _never_cancelled() -> bool:
    return False


def _ignore(event: ProgressEvent) -> None:
    return None


class ScanOrchestrator:
    """Run one scan session per :meth:`run` call.

    The orchestrator holds no per-scan state; the only thing shared between
    sessions is the cache it was given.
    """

    def __init__(
        self,
        settings: ScanSettings | None = None,
        cache: ScanCache | None = None,
        history: HistorySink | None = None,
        client_factory: ClientFactory = client_from_settings,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.settings = settings or ScanSettings()
        self.cache = cache if cache is not None else get_default_cache()
        self.history = history
        self._client_factory = client_factory
        self._sleep = sleep

    async def run(
        self,
        target_url: str,
        mode: ScanMode = ScanMode.QUICK,
        on_progress: ProgressCallback | None = None,
        is_cancelled: CancelCheck | None = None,
        use_cache: bool = True,
    ) -> list[Finding]:
        """Scan ``target_url`` and return its findings.

        Raises a :class:`ScanError` subclass on failure, after emitting a
        ``cancelled`` or ``error`` progress event.
        """
        emit = on_progress or _ignore
        cancelled = is_cancelled or _never_cancelled
        client: ZapClient | None = None

        try:
            client = self._client_factory(self.settings)
            target = normalize_target(target_url)
            mode = ScanMode(mode)

            if use_cache:
                cached = self.cache.get(target, mode)
                if cached is not None:
                    logger.info("Cache hit for %s (%s)", target.url, mode.value)
                    emit(
                        ProgressEvent(
                            state=ScanState.COMPLETED,
                            phase="cache",
                            progress=100,
                            message=f"Loaded {len(cached)} findings from cache",
                            cancellable=False,
                        )
                    )
                    return cached

            session = ScanSession(target=target, mode=mode, is_cancelled=cancelled)
            findings = await self._run_session(client, session, emit)
        except Exception as exc:
            error = classify_error(exc, endpoint=client.endpoint if client else None)
            self._report_failure(error, emit)
            if error is exc:
                raise
            raise error from exc

        self.cache.put(target, mode, findings)
        self._record_history(target.url, findings)
        emit(
            ProgressEvent(
                state=ScanState.COMPLETED,
                phase="done",
                progress=100,
                message=f"Scan complete: {len(findings)} findings",
                cancellable=False,
            )
        )
        return findings

    async def _run_session(
        self, client: ZapClient, session: ScanSession, emit: ProgressCallback
    ) -> list[Finding]:
        logger.info("Starting %s scan of %s", session.mode.value, session.target.url)
        async with client:
            emit(
                ProgressEvent(
                    state=ScanState.CONNECTING,
                    phase="probe",
                    progress=0,
                    message=f"Connecting to ZAP at {client.endpoint}...",
                )
            )
            if session.cancelled:
                raise ScanCancelledError()
            await probe_engine(client, timeout=self.settings.probe_timeout)

            runner = PhaseRunner(
                client, session, settings=self.settings, on_progress=emit, sleep=self._sleep
            )
            await runner.run()

            if session.cancelled:
                raise ScanCancelledError()
            session.enter(PhaseName.FETCHING_RESULTS)
            emit(
                ProgressEvent(
                    state=ScanState.FETCHING,
                    phase="results",
                    progress=100,
                    message="Fetching results...",
                    cancellable=False,
                )
            )
            fetcher = ResultFetcher(
                client,
                page_size=self.settings.results_page_size,
                timeout=self.settings.results_timeout,
            )
            findings = await fetcher.fetch(session.target)
            session.current.advance(100)
            return findings

    def _report_failure(self, error: ScanError, emit: ProgressCallback) -> None:
        if isinstance(error, ScanCancelledError):
            logger.info("Scan cancelled by caller")
            state = ScanState.CANCELLED
        else:
            logger.error("Security scan failed: %s", error.user_message)
            state = ScanState.ERROR
        event = ProgressEvent(
            state=state,
            phase="done",
            progress=0,
            message=error.user_message,
            cancellable=False,
        )
        try:
            emit(event)
        except Exception:
            logger.warning("Progress callback failed while reporting %s", state.value, exc_info=True)

    def _record_history(self, url: str, findings: list[Finding]) -> None:
        if self.history is None:
            return
        entry = HistoryEntry(
            url=url,
            timestamp=datetime.now(UTC).isoformat(),
            counts=SeverityCounts.from_findings(findings),
        )
        try:
            self.history.record(entry)
        except OSError:
            logger.warning("Failed to record scan history for %s", url, exc_info=True)


async def run_security_scan(
    target_url: str,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancelCheck | None = None,
    mode: ScanMode = ScanMode.QUICK,
    *,
    settings: ScanSettings | None = None,
    cache: ScanCache | None = None,
    history: HistorySink | None = None,
) -> list[Finding]:
    """Public entry point: scan one URL with the process-wide cache by default."""
    orchestrator = ScanOrchestrator(settings=settings, cache=cache, history=history)
    return await orchestrator.run(
        target_url, mode=mode, on_progress=on_progress, is_cancelled=is_cancelled
    )
