"""
Background garbage collection for stores that do not expire keys natively.
"""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GCWorker:
    """Runs store.gc() on a fixed interval outside the request path."""

    def __init__(self, store, interval: float):
        """
        Initialize GC worker.

        Args:
            store: Any object with an async gc() method
            interval: Seconds between sweeps
        """
        if interval <= 0:
            raise ValueError("GC interval must be positive")
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "GCWorker":
        """Start the sweep loop on the running event loop."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.debug(f"GC worker started for {type(self.store).__name__} every {self.interval}s")
        return self

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> int:
        """Run a single sweep, logging failures instead of raising."""
        try:
            removed = await self.store.gc()
        except Exception as e:
            logger.error(f"Session store GC failed: {e}")
            return 0
        if removed:
            logger.debug(f"GC removed {removed} expired sessions")
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()
