"""Background pruning of stale rate limit state."""

from __future__ import annotations

import asyncio
import logging

from autobrief.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)


class RateLimitSweeper:
    """Periodically calls ``limiter.sweep()`` on the running event loop.

    Started and stopped by the application lifespan. The sweep itself is a
    short, lock-guarded pass over the store, so it runs inline on the loop.
    """

    def __init__(self, limiter: AbstractRateLimiter, *, interval_seconds: float = 60.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._limiter = limiter
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop; a second call while running is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._interval})

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("rate_limit.sweeper_stopped")

    def sweep_once(self) -> int:
        removed = self._limiter.sweep()
        if removed:
            logger.debug("rate_limit.swept", extra={"removed": removed})
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("rate_limit.sweep_failed")
