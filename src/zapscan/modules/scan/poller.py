"""Generic repeat-until-done status polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from zapscan.tools.http import TransportError

from .errors import PollTimeoutError, ScanCancelledError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0


@dataclass(frozen=True, slots=True)
class StatusReading:
    progress: int
    done: bool

    @classmethod
    def from_progress(cls, progress: int) -> "StatusReading":
        return cls(progress=progress, done=progress >= 100)


COMPLETED = StatusReading(progress=100, done=True)

StatusCheck = Callable[[], Awaitable[StatusReading]]
SleepFn = Callable[[float], Awaitable[object]]


async def poll_until_complete(
    check_status: StatusCheck,
    on_progress: Callable[[int, int], None] | None,
    is_cancelled: Callable[[], bool],
    max_attempts: int,
    interval: float = DEFAULT_POLL_INTERVAL,
    sleep: SleepFn = asyncio.sleep,
) -> StatusReading:
    """Poll ``check_status`` until it reports done.

    ``on_progress(progress, attempt)`` fires only when progress changes and
    never reports a lower value than before. A not-found status read counts as
    completion because the engine tears the status endpoint down once a job
    finishes. ``max_attempts == 0`` polls without limit.
    """
    attempts = 0
    last: int | None = None

    while True:
        if is_cancelled():
            raise ScanCancelledError()

        try:
            reading = await check_status()
        except TransportError as exc:
            if not exc.not_found:
                raise
            logger.info("Status endpoint reports job gone (%s); treating as complete", exc)
            reading = COMPLETED

        progress = reading.progress if last is None else max(last, reading.progress)
        if progress != last:
            last = progress
            if on_progress:
                on_progress(progress, attempts + 1)

        if reading.done:
            return StatusReading(progress=progress, done=True)

        attempts += 1
        if max_attempts > 0 and attempts >= max_attempts:
            raise PollTimeoutError(attempts)

        await sleep(interval)
