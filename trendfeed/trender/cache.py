"""Single-slot snapshot cache with periodic refresh."""

import asyncio
from typing import Optional

from trendfeed.core.logging import get_logger
from trendfeed.core.models import Snapshot
from trendfeed.trender.pipeline import TrendPipeline

logger = get_logger(__name__)


class TrendCache:
    """
    Holds the latest committed Snapshot.

    Refreshes are serialized by a lock so there is a single writer. Readers
    take the current reference without locking and never see a partially
    built snapshot.
    """

    def __init__(self, pipeline: TrendPipeline, refresh_interval_seconds: float = 15 * 60):
        self.pipeline = pipeline
        self.refresh_interval_seconds = refresh_interval_seconds
        self._snapshot: Optional[Snapshot] = None
        self._lock = asyncio.Lock()

    def get(self) -> Optional[Snapshot]:
        """Current snapshot, or None when nothing has been fetched yet."""
        return self._snapshot

    async def refresh(self) -> Snapshot:
        """Run a fetch cycle and replace the cached snapshot.

        On failure the exception propagates and the previous snapshot stays.
        """
        async with self._lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> Snapshot:
        try:
            snapshot = await self.pipeline.run()
        except Exception as e:
            logger.error(f"Error processing trending topics: {e}")
            raise
        self._snapshot = snapshot
        return snapshot

    async def get_or_refresh(self) -> Snapshot:
        """Cached snapshot, fetching synchronously when the cache is cold."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        async with self._lock:
            # Another request may have filled the cache while we waited.
            if self._snapshot is not None:
                return self._snapshot
            logger.info("Cache is cold, fetching trends")
            return await self._refresh_locked()

    async def run_periodic(self) -> None:
        """Refresh forever on the configured interval, logging failures."""
        while True:
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Scheduled trends refresh failed, keeping previous snapshot")
            await asyncio.sleep(self.refresh_interval_seconds)
