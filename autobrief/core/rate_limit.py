"""Rate limiting wiring between the limiter adapter and HTTP responses.

Strategy:
- Fixed-window limit per client network origin (see ``client_identity``).
- Every attempt counts, including rejected ones, so hammering a closed window
  keeps it closed instead of earning extra retries.
- Informational ``X-RateLimit-*`` headers are set on every checked request.
"""

from __future__ import annotations

import logging
import math
from typing import MutableMapping

from autobrief.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from autobrief.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from autobrief.adapters.rate_limit.sweeper import RateLimitSweeper
from autobrief.core.config import AppSettings
from autobrief.core.logging import hash_identifier

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please slow down."


def create_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter | None:
    """Build the process-wide limiter, or None when rate limiting is disabled."""
    if not app_settings.rate_limit_enabled:
        return None

    return InMemoryFixedWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


def create_sweeper(limiter: AbstractRateLimiter | None, app_settings: AppSettings) -> RateLimitSweeper | None:
    if limiter is None:
        return None
    return RateLimitSweeper(limiter, interval_seconds=app_settings.rate_limit_sweep_interval_seconds)


def apply_rate_limit(
    limiter: AbstractRateLimiter,
    client_id: str,
    headers: MutableMapping[str, str],
) -> RateLimitResult:
    """Consume one unit for ``client_id`` and stamp the rate limit headers.

    Args:
        limiter: Process-wide limiter.
        client_id: Caller identifier.
        headers: Response headers being assembled for this request.

    Returns:
        The limiter's decision. On denial ``Retry-After`` is set as well.
    """
    result = limiter.check(client_id)

    headers["X-RateLimit-Limit"] = str(result.limit)
    headers["X-RateLimit-Remaining"] = str(result.remaining)
    headers["X-RateLimit-Reset"] = str(math.ceil(result.reset_at))

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": hash_identifier(client_id),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return result

    headers["Retry-After"] = str(result.retry_after_seconds)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": hash_identifier(client_id),
            "limit": result.limit,
            "retry_after_s": result.retry_after_seconds,
        },
    )
    return result
