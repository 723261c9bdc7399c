"""
Clock sources for deadline evaluation.

The ledger never schedules anything: a deadline is "passed" when
``clock.now() >= end_time``. Campaigns only read time, so tests and the
CLI drive a ManualClock forward the way a development chain is
fast-forwarded.
"""

import time
from typing import Protocol

import structlog

logger = structlog.get_logger()


SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY


class Clock(Protocol):
    """Monotonic source of the current time in whole seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock time, truncated to seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock advanced explicitly by the caller.

    Example:
        clock = ManualClock(epoch=1_700_000_000)
        campaign = Campaign(clock=clock)
        ...
        clock.advance(SECONDS_PER_WEEK + 1)  # deadline has now passed
    """

    def __init__(self, epoch: int = 0):
        if epoch < 0:
            raise ValueError("Epoch must be non-negative")
        self._now = epoch

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move time forward by ``seconds`` and return the new time."""
        if seconds < 0:
            raise ValueError("Cannot move time backwards")
        self._now += seconds
        logger.debug("clock.advanced", seconds=seconds, now=self._now)
        return self._now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute ``timestamp`` no earlier than the current time."""
        if timestamp < self._now:
            raise ValueError(f"Cannot move time backwards from {self._now} to {timestamp}")
        self._now = timestamp
        return self._now

    def advance_hours(self, hours: int) -> int:
        return self.advance(hours * SECONDS_PER_HOUR)

    def advance_days(self, days: int) -> int:
        return self.advance(days * SECONDS_PER_DAY)

    def advance_weeks(self, weeks: int) -> int:
        return self.advance(weeks * SECONDS_PER_WEEK)
