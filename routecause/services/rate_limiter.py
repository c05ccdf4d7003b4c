"""
Per-minute and per-day quota for calls to the metered routing provider.

Windows are fixed buckets aligned to UTC: the minute window resets at the top
of every UTC minute and the daily window at UTC midnight.
"""

import logging
import threading
import time
from typing import Callable, List

from routecause.errors import RateLimitExceededError
from routecause.models.trip import RateLimitStatus

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60
DAY_SECONDS = 24 * 60 * 60


class RateLimiter:
    """Quota counter shared by every caller of one provider endpoint."""

    def __init__(
        self,
        minute_limit: int,
        daily_limit: int,
        name: str = "ors",
        clock: Callable[[], float] = time.time,
    ):
        self.minute_limit = minute_limit
        self.daily_limit = daily_limit
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self.minute_calls: List[float] = []
        self.daily_calls: List[float] = []

    @staticmethod
    def _window_start(now: float, length: int) -> float:
        # Unix epoch is UTC midnight, so flooring aligns to UTC boundaries
        return (now // length) * length

    def _counts(self, now: float):
        minute_start = self._window_start(now, MINUTE_SECONDS)
        day_start = self._window_start(now, DAY_SECONDS)
        minute_used = sum(1 for t in self.minute_calls if t >= minute_start)
        daily_used = sum(1 for t in self.daily_calls if t >= day_start)
        return minute_used, daily_used

    def _status(self, now: float, minute_used: int, daily_used: int) -> RateLimitStatus:
        minute_reset = self._window_start(now, MINUTE_SECONDS) + MINUTE_SECONDS
        daily_reset = self._window_start(now, DAY_SECONDS) + DAY_SECONDS
        return RateLimitStatus(
            minute_remaining=max(0, self.minute_limit - minute_used),
            daily_remaining=max(0, self.daily_limit - daily_used),
            minute_reset_ms=int(round((minute_reset - now) * 1000)),
            daily_reset_ms=int(round((daily_reset - now) * 1000)),
        )

    def consume(self) -> None:
        """Record one call, or raise RateLimitExceededError without recording."""
        with self._lock:
            now = self._clock()
            minute_start = self._window_start(now, MINUTE_SECONDS)
            day_start = self._window_start(now, DAY_SECONDS)
            self.minute_calls = [t for t in self.minute_calls if t >= minute_start]
            self.daily_calls = [t for t in self.daily_calls if t >= day_start]

            window = None
            if len(self.minute_calls) >= self.minute_limit:
                window = "minute"
            elif len(self.daily_calls) >= self.daily_limit:
                window = "daily"

            if window is not None:
                status = self._status(now, len(self.minute_calls), len(self.daily_calls))
                logger.warning(
                    f"[RateLimiter:{self.name}] {window} quota exceeded "
                    f"(minute {len(self.minute_calls)}/{self.minute_limit}, "
                    f"daily {len(self.daily_calls)}/{self.daily_limit})"
                )
                raise RateLimitExceededError(
                    window=window,
                    minute_remaining=status.minute_remaining,
                    daily_remaining=status.daily_remaining,
                    minute_reset_ms=status.minute_reset_ms,
                    daily_reset_ms=status.daily_reset_ms,
                )

            self.minute_calls.append(now)
            self.daily_calls.append(now)

    def get_status(self) -> RateLimitStatus:
        with self._lock:
            now = self._clock()
            minute_used, daily_used = self._counts(now)
            return self._status(now, minute_used, daily_used)
