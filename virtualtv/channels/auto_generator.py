"""
Automatic channel generation.

Creates genre and decade channels from whatever the library holds.
"""

import logging
from collections import Counter
from typing import List

from virtualtv.config import AUTO_CHANNEL_PREFIX, AutoChannelsConfig, ChannelPolicy, ChannelType
from virtualtv.library.base import CatalogSource, ContentFilter, ItemType

logger = logging.getLogger(__name__)

AUTO_COMMERCIAL_INTERVAL = 900


class AutoChannelGenerator:
    """Generates channel policies from library content."""

    def __init__(self, catalog: CatalogSource, config: AutoChannelsConfig):
        self.catalog = catalog
        self.config = config

    async def generate(self) -> List[ChannelPolicy]:
        """
        Generate channels based on configuration.

        Returns:
            Generated channel policies, numbered from base_channel_number.
        """
        if not self.config.enabled:
            return []

        channels: List[ChannelPolicy] = []
        number = self.config.base_channel_number

        if self.config.genre_channels:
            genre_channels = await self.generate_genre_channels(number)
            channels.extend(genre_channels)
            number += len(genre_channels)

        if self.config.year_channels:
            year_channels = await self.generate_year_channels(number)
            channels.extend(year_channels)

        logger.info(f"Auto-generated {len(channels)} channels")
        return channels

    async def generate_genre_channels(self, starting_number: int) -> List[ChannelPolicy]:
        """Create one channel per genre with enough content."""
        items = await self.catalog.query(ContentFilter.all())

        counts: Counter = Counter()
        for item in items:
            for genre in set(item.genres):
                counts[genre] += 1

        logger.info(f"Found {len(counts)} genres for auto-channel generation")

        channels = []
        number = starting_number
        for genre in sorted(counts):
            # Only create channels for genres with sufficient content
            if counts[genre] < self.config.min_genre_items:
                continue

            channels.append(self._auto_policy(
                name=f"{genre} Channel",
                number=number,
                channel_type=ChannelType.GENRE,
                content_filter=genre,
            ))
            number += 1

        return channels

    async def generate_year_channels(self, starting_number: int) -> List[ChannelPolicy]:
        """Create one channel per decade of movies with enough content."""
        items = await self.catalog.query(ContentFilter.all())
        decades: Counter = Counter(
            (item.year // 10) * 10
            for item in items
            if item.item_type == ItemType.MOVIE and item.year
        )

        logger.info(f"Found {len(decades)} decades for auto-channel generation")

        channels = []
        number = starting_number
        for decade in sorted(decades, reverse=True):
            if decades[decade] < self.config.min_decade_items:
                continue

            channels.append(self._auto_policy(
                name=f"{decade}s Movies",
                number=number,
                channel_type=ChannelType.YEAR,
                content_filter=f"{decade}s",
            ))
            number += 1

        return channels

    async def update_channels(self, existing: List[ChannelPolicy]) -> List[ChannelPolicy]:
        """
        Replace previously generated channels with a fresh set.

        Hand-configured channels are kept as they are.
        """
        kept = [channel for channel in existing if not channel.is_auto_generated]
        generated = await self.generate()
        logger.info(
            f"Updated auto-generated channels: {len(kept)} kept, {len(generated)} generated"
        )
        return kept + generated

    @staticmethod
    def _auto_policy(
        name: str,
        number: int,
        channel_type: ChannelType,
        content_filter: str,
    ) -> ChannelPolicy:
        slug = content_filter.lower().replace(" ", "_")
        return ChannelPolicy(
            id=f"{AUTO_CHANNEL_PREFIX}{channel_type.value}_{slug}",
            name=name,
            number=number,
            type=channel_type,
            content_filters=[content_filter],
            shuffle=True,
            respect_episode_order=False,
            commercial_interval_seconds=AUTO_COMMERCIAL_INTERVAL,
            enable_pre_rolls=True,
            enabled=True,
        )
