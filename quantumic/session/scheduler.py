"""
Polling scheduler.

Refreshes every cache slot once on start, then again on a fixed interval
until stopped. Stopping cancels only the timer: refreshes already
dispatched run to completion (the cache decides whether to apply them).
"""

import asyncio
import logging

from quantumic.session.cache import SyncedStateCache

logger = logging.getLogger(__name__)


class PollingScheduler:
    """Background task that keeps the synced state cache fresh."""

    def __init__(self, cache: SyncedStateCache, interval: float = 30.0):
        """
        Args:
            cache: Cache whose slots are refreshed on every tick
            interval: Seconds between ticks
        """
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got: {interval}")
        self.cache = cache
        self.interval = interval
        self.tick_count = 0
        self._task: asyncio.Task | None = None
        # Refreshes dispatched by ticks; held so they are not garbage collected
        self._refreshes: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Refresh everything now and arm the repeating timer. Needs a running loop."""
        if self.is_running:
            return
        self._tick()
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Polling started ({self.interval:.0f}s interval)")

    async def stop(self) -> None:
        """Cancel the timer. In-flight refreshes are left alone."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Polling stopped")

    async def wait_for_refreshes(self) -> None:
        """Wait for every dispatched refresh to finish."""
        if self._refreshes:
            await asyncio.gather(*list(self._refreshes), return_exceptions=True)

    # ── main loop ──────────────────────────────────────────────────────────────

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._tick()

    def _tick(self) -> None:
        self.tick_count += 1
        task = asyncio.create_task(self.cache.refresh_all())
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)
