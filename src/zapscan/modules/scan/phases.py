"""Sequencing of the remote spider and active-scan phases."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from zapscan.config import ScanSettings
from zapscan.tools.http import TransportError, ZapClient

from .context import ContextRegistrar, ContextRegistration
from .errors import PollTimeoutError, ScanCancelledError, ScanStartError, ScanTimeoutError
from .models import (
    PhaseName,
    ProgressCallback,
    ProgressEvent,
    ScanSession,
    ScanState,
)
from .poller import SleepFn, StatusReading, poll_until_complete
from .schemas import ScanStarted, StatusView

logger = logging.getLogger(__name__)

SPIDER_START_PATH = "/JSON/spider/action/scan/"
SPIDER_STATUS_PATH = "/JSON/spider/view/status/"
ASCAN_START_PATH = "/JSON/ascan/action/scan/"
ASCAN_STATUS_PATH = "/JSON/ascan/view/status/"
ASCAN_STOP_PATH = "/JSON/ascan/action/stop/"
ACCESS_URL_PATH = "/JSON/core/action/accessUrl/"


def _noop(event: ProgressEvent) -> None:
    return None


class PhaseRunner:
    """Run the remote phases of one session in order, emitting phase-scoped progress."""

    def __init__(
        self,
        client: ZapClient,
        session: ScanSession,
        settings: ScanSettings | None = None,
        on_progress: ProgressCallback | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.client = client
        self.session = session
        self.settings = settings or ScanSettings()
        self._emit = on_progress or _noop
        self._sleep = sleep

    def _check_cancelled(self) -> None:
        if self.session.cancelled:
            raise ScanCancelledError()

    def _event(self, phase: str, progress: int, message: str, cancellable: bool = True) -> None:
        self._emit(
            ProgressEvent(
                state=ScanState.SCANNING,
                phase=phase,
                progress=progress,
                message=message,
                cancellable=cancellable,
            )
        )

    async def _status(self, path: str, scan_id: str) -> StatusReading:
        self._check_cancelled()
        data = await self.client.get_json(
            path, params={"scanId": scan_id}, timeout=self.settings.status_timeout
        )
        return StatusReading.from_progress(StatusView.from_payload(data).status)

    async def run(self) -> None:
        """Spider and context (full mode), then URL registration and the active scan."""
        context = None
        if self.session.mode.runs_spider:
            await self.run_spider()
        if self.session.mode.uses_context:
            context = await self.register_context()
        await self.register_url()
        await self.run_active_scan(context)

    async def run_spider(self) -> None:
        """Crawl the target. Hitting the attempt ceiling is logged, not raised."""
        target = self.session.target
        self._event("spider", 0, "Starting spider scan...")
        self._check_cancelled()
        try:
            started = ScanStarted.from_payload(
                await self.client.get_json(SPIDER_START_PATH, params={"url": target.url})
            )
        except TransportError as exc:
            raise ScanStartError(
                f"spider scan: {exc.diagnostic}", status=exc.status
            ) from exc
        if not started.scan_id:
            raise ScanStartError("spider scan: engine returned no scan id")

        state = self.session.enter(PhaseName.SPIDERING, job_id=started.scan_id)
        max_attempts = self.settings.spider_max_attempts

        def report(progress: int, attempt: int) -> None:
            value = state.advance(progress)
            self._event(
                "spider",
                value,
                f"Spider scan in progress: {value}% ({attempt}/{max_attempts})",
            )

        try:
            await poll_until_complete(
                lambda: self._status(SPIDER_STATUS_PATH, started.scan_id),
                report,
                lambda: self.session.cancelled,
                max_attempts,
                interval=self.settings.poll_interval,
                sleep=self._sleep,
            )
        except PollTimeoutError:
            logger.warning(
                "Spider scan timed out after %d attempts, continuing with active scan",
                max_attempts,
            )

    async def register_context(self) -> ContextRegistration | None:
        """Best-effort scoping of the target; None means unscoped parameters."""
        self._check_cancelled()
        self.session.enter(PhaseName.REGISTERING_CONTEXT)
        self._event("context", 15, "Preparing scan context...")
        registrar = ContextRegistrar(self.client, is_cancelled=lambda: self.session.cancelled)
        registration = await registrar.ensure(self.session.target)
        self.session.current.advance(100)
        return registration

    async def register_url(self) -> bool:
        """Make the engine request the target so it appears in the scan tree."""
        target = self.session.target
        self._event("setup", 5, "Registering URL with ZAP...")
        if await self._access_url(target.display):
            return True
        if target.display != target.url:
            logger.info("Retrying URL registration with base URL %s", target.url)
            if await self._access_url(target.url):
                return True
        logger.warning("Could not access %s through ZAP, scan might fail", target.url)
        return False

    async def _access_url(self, url: str) -> bool:
        self._check_cancelled()
        try:
            await self.client.get_json(
                ACCESS_URL_PATH,
                params={"url": url, "followRedirects": True},
                timeout=self.settings.access_timeout,
            )
        except TransportError as exc:
            logger.warning("Failed to access URL through ZAP: %s (%s)", url, exc)
            return False
        return True

    def scan_params(self, context: ContextRegistration | None = None) -> dict[str, Any]:
        """Active-scan parameters for the session's mode."""
        return {
            "url": self.session.target.url,
            "recurse": self.session.mode.recurse,
            "inScopeOnly": False,
            "scanPolicyName": self.settings.scan_policy,
            "method": "GET",
            "postData": "",
            "contextId": context.context_id if context else "",
            "handleParameters": "IGNORE_VALUE",
            "scanHeadersAllRequests": True,
            "delayInMs": 0,
            "threadPerHost": self.settings.threads_per_host,
        }

    async def start_active_scan(self, context: ContextRegistration | None = None) -> str:
        """Start the active scan, retrying a bounded number of times."""
        params = self.scan_params(context)
        attempts = max(1, self.settings.start_attempts)
        last_error = ""
        last_status = None

        for attempt in range(1, attempts + 1):
            self._check_cancelled()
            logger.info("Starting active scan (attempt %d/%d)", attempt, attempts)
            try:
                started = ScanStarted.from_payload(
                    await self.client.get_json(
                        ASCAN_START_PATH, params=params, timeout=self.settings.request_timeout
                    )
                )
                if started.scan_id:
                    logger.info("Active scan started with id %s", started.scan_id)
                    return started.scan_id
                last_error = "Invalid response from ZAP API when starting active scan"
                last_status = None
            except TransportError as exc:
                last_error = exc.diagnostic
                last_status = exc.status
                if exc.not_found:
                    last_error += " (URL not found in scan tree)"

            if attempt < attempts:
                logger.warning(
                    "Active scan start attempt %d failed (%s), retrying in %.0fs",
                    attempt,
                    last_error,
                    self.settings.start_backoff,
                )
                await self._sleep(self.settings.start_backoff)
                self._check_cancelled()
                await self._access_url(self.session.target.url)

        raise ScanStartError(f"active scan: {last_error}", status=last_status)

    async def run_active_scan(self, context: ContextRegistration | None = None) -> None:
        """Start the active scan and wait for it, stopping it if cancelled."""
        self._event("scan", 0, "Starting active scan...")
        scan_id = await self.start_active_scan(context)
        state = self.session.enter(PhaseName.ACTIVE_SCANNING, job_id=scan_id)

        mode = self.session.mode
        max_attempts = (
            self.settings.full_max_attempts if mode.recurse else self.settings.quick_max_attempts
        )

        def report(progress: int, attempt: int) -> None:
            value = state.advance(progress)
            self._event(
                "scan",
                value,
                f"Security scan in progress: {value}% ({attempt}/{max_attempts})",
            )

        try:
            await poll_until_complete(
                lambda: self._status(ASCAN_STATUS_PATH, scan_id),
                report,
                lambda: self.session.cancelled,
                max_attempts,
                interval=self.settings.poll_interval,
                sleep=self._sleep,
            )
        except ScanCancelledError:
            await self.stop_active_scan(scan_id)
            raise
        except PollTimeoutError as exc:
            raise ScanTimeoutError(exc.attempts) from exc

    async def stop_active_scan(self, scan_id: str) -> None:
        """Ask the engine to stop a job. Failures are logged and swallowed."""
        try:
            await self.client.get_json(
                ASCAN_STOP_PATH, params={"scanId": scan_id}, timeout=self.settings.stop_timeout
            )
            logger.info("Stopped active scan %s", scan_id)
        except TransportError as exc:
            logger.warning("Failed to stop active scan %s: %s", scan_id, exc)
