"""Rate limiter interfaces.

The admission pipeline depends on this abstraction, not on the in-memory
implementation, so the store can be swapped without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when blocked).
        reset_at: UNIX time (seconds) when the current window ends.
        retry_after_seconds: Whole seconds until the window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int


class AbstractRateLimiter(ABC):
    """Interface for per-client rate limiters."""

    @abstractmethod
    def check(self, key: str) -> RateLimitResult:
        """Count one admission attempt for ``key`` and decide allow/deny.

        Every call consumes budget, including calls that end up denied.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Drop stale per-key state.

        Returns:
            Number of keys removed.
        """
        raise NotImplementedError
