"""
Per-channel content queues.

Each channel keeps an ordered backlog of catalog items. When the backlog
runs low it is replaced with a fresh catalog query before the next item is
handed out.
"""

import asyncio
import logging
import random
import time
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from virtualtv.config import ChannelPolicy
from virtualtv.library.base import CatalogSource, ContentItem

logger = logging.getLogger(__name__)


class ContentQueue:
    """
    Ordered content backlog for every channel.

    The check-refill-dequeue sequence for a channel runs under that
    channel's lock, so concurrent callers never both refill or both
    dequeue from an empty backlog.

    Commercial pools are fetched once per folder and reused until they are
    older than commercial_pool_ttl seconds.
    """

    LOW_WATER_MARK = 3
    COMMERCIAL_POOL_TTL = 3600.0

    def __init__(
        self,
        catalog: CatalogSource,
        rng: Optional[random.Random] = None,
        commercial_pool_ttl: float = COMMERCIAL_POOL_TTL,
    ):
        self.catalog = catalog
        self.commercial_pool_ttl = commercial_pool_ttl
        self._rng = rng or random.Random()
        self._queues: Dict[str, Deque[ContentItem]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._pools: Dict[str, Tuple[float, List[ContentItem]]] = {}
        self._pool_lock = asyncio.Lock()

    def _lock_for(self, channel_id: str) -> asyncio.Lock:
        lock = self._locks.get(channel_id)
        if lock is None:
            lock = self._locks.setdefault(channel_id, asyncio.Lock())
        return lock

    async def next_item(
        self,
        channel_id: str,
        policy: ChannelPolicy,
    ) -> Optional[ContentItem]:
        """
        Get the next item for a channel.

        Refills the backlog first if fewer than LOW_WATER_MARK entries
        remain. Returns None when the backlog is empty and the refill
        found nothing.
        """
        async with self._lock_for(channel_id):
            queue = self._queues.get(channel_id)
            if queue is None or len(queue) < self.LOW_WATER_MARK:
                await self._refill(channel_id, policy)
                queue = self._queues.get(channel_id)

            if not queue:
                return None
            return queue.popleft()

    async def _refill(self, channel_id: str, policy: ChannelPolicy) -> None:
        """Replace a channel's backlog with fresh catalog content."""
        items = await self.catalog.query(
            policy.selection_filter(),
            policy.selection_sort(),
        )
        items = [item for item in items if item.is_playable]

        if not items:
            logger.warning(f"No content found for channel {channel_id}")
            return

        if policy.shuffle:
            self._rng.shuffle(items)

        self._queues[channel_id] = deque(items)
        logger.info(f"Refilled queue for channel {channel_id} with {len(items)} items")

    async def commercials(self, path: str, count: int) -> List[ContentItem]:
        """
        Draw commercials from the pool at a folder path.

        Each call draws independently; the same commercial can recur in
        later breaks.
        """
        if not path or count <= 0:
            return []

        pool = list(await self._commercial_pool(path))
        self._rng.shuffle(pool)
        return pool[:count]

    async def _commercial_pool(self, path: str) -> List[ContentItem]:
        """Get the cached pool for a folder, fetching it when missing or stale."""
        async with self._pool_lock:
            cached = self._pools.get(path)
            now = time.monotonic()
            if cached is not None and now - cached[0] < self.commercial_pool_ttl:
                return cached[1]

            pool = [item for item in await self.catalog.query_path(path) if item.has_duration]
            self._pools[path] = (now, pool)
            if not pool:
                logger.warning(f"No commercials found under {path}")
            else:
                logger.info(f"Loaded {len(pool)} commercials from {path}")
            return pool

    def clear_commercials(self) -> None:
        """Forget cached commercial pools so the next draw refetches them."""
        self._pools.clear()

    def clear(self, channel_id: str) -> None:
        """Empty a channel's backlog."""
        queue = self._queues.get(channel_id)
        if queue is not None:
            queue.clear()
            logger.info(f"Cleared queue for channel {channel_id}")

    def clear_all(self) -> None:
        """Empty every channel's backlog."""
        for queue in self._queues.values():
            queue.clear()
        self.clear_commercials()
        logger.info("Cleared all channel queues")

    def size(self, channel_id: str) -> int:
        """Get the number of items left in a channel's backlog."""
        queue = self._queues.get(channel_id)
        return len(queue) if queue is not None else 0

    def snapshot(self, channel_id: str) -> List[ContentItem]:
        """Get a copy of a channel's remaining backlog."""
        return list(self._queues.get(channel_id, ()))
