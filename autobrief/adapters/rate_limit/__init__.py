"""Rate limiting adapters.

An in-memory, per-process limiter plus the background task that prunes it.
The abstraction leaves room for a shared store later without changing the
admission pipeline.
"""

from autobrief.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from autobrief.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from autobrief.adapters.rate_limit.sweeper import RateLimitSweeper

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
    "RateLimitSweeper",
]
