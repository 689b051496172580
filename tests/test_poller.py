"""Tests for the generic status poller."""

import pytest

from zapscan.modules.scan import (
    PollTimeoutError,
    ScanCancelledError,
    StatusReading,
    poll_until_complete,
)
from zapscan.tools.http import TransportError


def scripted(*items):
    """Build a status check that replays readings (or raises errors) in order."""
    queue = list(items)
    calls = []

    async def check():
        calls.append(len(calls))
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return StatusReading.from_progress(item)

    check.calls = calls
    return check


class TestPollUntilComplete:
    """Test poll_until_complete."""

    async def test_reports_progress_until_done(self, no_sleep):
        check = scripted(0, 50, 100)
        seen = []

        result = await poll_until_complete(
            check, lambda p, a: seen.append((p, a)), lambda: False, 10, sleep=no_sleep
        )

        assert result.done and result.progress == 100
        assert seen == [(0, 1), (50, 2), (100, 3)]
        assert no_sleep.calls == [2.0, 2.0]

    async def test_repeated_progress_not_reported(self, no_sleep):
        check = scripted(40, 40, 100)
        seen = []

        await poll_until_complete(check, lambda p, a: seen.append(p), lambda: False, 10, sleep=no_sleep)

        assert seen == [40, 100]

    async def test_progress_never_decreases(self, no_sleep):
        check = scripted(60, 30, 70, 100)
        seen = []

        await poll_until_complete(check, lambda p, a: seen.append(p), lambda: False, 10, sleep=no_sleep)

        assert seen == [60, 70, 100]

    async def test_cancelled_before_first_check(self, no_sleep):
        check = scripted(100)

        with pytest.raises(ScanCancelledError):
            await poll_until_complete(check, None, lambda: True, 10, sleep=no_sleep)

        assert check.calls == []

    async def test_cancelled_between_checks(self, no_sleep):
        check = scripted(10, 20, 100)
        flags = iter([False, True])

        with pytest.raises(ScanCancelledError):
            await poll_until_complete(check, None, lambda: next(flags), 10, sleep=no_sleep)

        assert len(check.calls) == 1

    async def test_not_found_counts_as_complete(self, no_sleep):
        check = scripted(30, TransportError("gone", status=404))
        seen = []

        result = await poll_until_complete(
            check, lambda p, a: seen.append(p), lambda: False, 10, sleep=no_sleep
        )

        assert result.progress == 100
        assert seen == [30, 100]

    async def test_other_transport_errors_propagate(self, no_sleep):
        check = scripted(TransportError("HTTP 500", status=500))

        with pytest.raises(TransportError):
            await poll_until_complete(check, None, lambda: False, 10, sleep=no_sleep)

    async def test_times_out_after_max_attempts(self, no_sleep):
        check = scripted(*([10] * 5))

        with pytest.raises(PollTimeoutError) as exc_info:
            await poll_until_complete(check, None, lambda: False, 3, sleep=no_sleep)

        assert exc_info.value.attempts == 3
        assert len(check.calls) == 3

    async def test_zero_max_attempts_is_unlimited(self, no_sleep):
        check = scripted(*([5] * 50), 100)

        result = await poll_until_complete(check, None, lambda: False, 0, sleep=no_sleep)

        assert result.done
        assert len(check.calls) == 51

    async def test_custom_interval(self, no_sleep):
        check = scripted(0, 100)

        await poll_until_complete(check, None, lambda: False, 5, interval=0.5, sleep=no_sleep)

        assert no_sleep.calls == [0.5]
