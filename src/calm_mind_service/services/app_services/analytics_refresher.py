"""
Host-side polling: periodically fetch a fresh snapshot and recompute.

The stress engine itself has no timers; this scheduler lives in the host
and simply calls the pure engine functions on every tick.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from loguru import logger

S = TypeVar("S")
T = TypeVar("T")


class AnalyticsRefresher(Generic[S, T]):
    """Re-fetches a snapshot on an interval and keeps the last computed result."""

    def __init__(
        self,
        fetch_snapshot: Callable[[], Awaitable[S]],
        compute: Callable[[S], T],
        refresh_interval_seconds: float = 300,
    ):
        """
        Initialize the refresher.

        Args:
            fetch_snapshot: Async provider of the current records (host I/O)
            compute: Pure function turning a snapshot into a dashboard
            refresh_interval_seconds: Delay between two refreshes
        """
        self.fetch_snapshot = fetch_snapshot
        self.compute = compute
        self.refresh_interval = refresh_interval_seconds
        self.is_running = False
        self.latest: Optional[T] = None
        self._task: Optional[asyncio.Task] = None

        # Statistics
        self.stats: Dict[str, Any] = {
            "total_refreshes": 0,
            "total_failed": 0,
            "last_run": None,
            "last_error": None,
            "processing_time_ms": 0,
        }

    async def start(self) -> None:
        """Start the background refresh task."""
        if self.is_running:
            logger.warning("Analytics refresher already running")
            return

        self.is_running = True
        self._task = asyncio.create_task(self._background_refresh())
        logger.info(f"Analytics refresher started, refreshing every {self.refresh_interval} seconds")

    async def stop(self) -> None:
        """Stop the background refresh task."""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Analytics refresher stopped")

    async def refresh_once(self) -> Optional[T]:
        """
        Fetch one snapshot and recompute.

        A failed fetch or computation keeps the previous result.
        """
        start_time = datetime.now()
        try:
            snapshot = await self.fetch_snapshot()
            self.latest = self.compute(snapshot)
            self.stats["total_refreshes"] += 1
        except Exception as e:
            logger.error(f"Error refreshing analytics: {e}")
            self.stats["total_failed"] += 1
            self.stats["last_error"] = str(e)
        finally:
            elapsed = (datetime.now() - start_time).total_seconds() * 1000
            self.stats["processing_time_ms"] = elapsed
            self.stats["last_run"] = datetime.now().isoformat()
        return self.latest

    async def _background_refresh(self) -> None:
        """Main refresh loop."""
        while self.is_running:
            await self.refresh_once()
            await asyncio.sleep(self.refresh_interval)
