"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards both per-key updates and sweeps.
- Windows are anchored at each key's first request, not at wall-clock
  boundaries, and reset wholesale once they have elapsed. A burst straddling
  a reset can therefore admit up to twice the limit in a short span.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from autobrief.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowRecord:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Per-key fixed-window counters held in a process-local dict.

    One instance is built per process by the application factory and
    injected into the admission pipeline.
    """

    def __init__(
        self,
        *,
        limit: int = 20,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Window length in seconds.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[str, _WindowRecord] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def check(self, key: str) -> RateLimitResult:
        """Count an admission attempt for ``key``.

        A missing or expired record is replaced by a fresh one before the
        count is incremented, so the first request of a window has count 1.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            record = self._records.get(key)
            if record is None or now - record.window_start > self._window_seconds:
                record = _WindowRecord(window_start=now, count=0)
                self._records[key] = record

            record.count += 1
            count = record.count
            reset_at = record.window_start + self._window_seconds

        allowed = count <= self._limit
        retry_after = max(0, math.ceil(reset_at - now))
        if not allowed:
            # At exactly reset_at the old window still applies
            retry_after = max(1, retry_after)

        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    def sweep(self) -> int:
        """Remove records whose window started more than two windows ago."""
        with self._lock:
            now = self._clock()
            cutoff = self._window_seconds * 2
            stale = [key for key, record in self._records.items() if now - record.window_start > cutoff]
            for key in stale:
                del self._records[key]
        return len(stale)
