"""
Virtual channel service.

Wires the catalog, content queues, commercial planner, schedule builder,
committed timelines, channel state, and playback together, and exposes the
operations used by the HTTP layer and the background tasks.
"""

import asyncio
import logging
import random
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from virtualtv.channels.auto_generator import AutoChannelGenerator
from virtualtv.config import CatalogConfig, ChannelPolicy, VirtualTVConfig
from virtualtv.epg import build_xmltv, channel_playlist, master_playlist
from virtualtv.exceptions import CatalogError, ChannelNotFoundError, VirtualTVError
from virtualtv.library import CatalogSource, ContentFilter, InMemoryCatalog, JellyfinCatalog
from virtualtv.playout import (
    ChannelTimeline,
    CommercialPlanner,
    ContentQueue,
    GuideBuildResult,
    ScheduleBuilder,
)
from virtualtv.streaming import (
    ChannelStateStore,
    ChannelStatistics,
    PlaybackStart,
    PlaybackStarter,
    StreamLauncher,
    utc_now,
)
from virtualtv.tasks import TaskScheduler

logger = logging.getLogger(__name__)

PLAYBACK_LOOKAHEAD = timedelta(hours=1)


def build_catalog(config: CatalogConfig) -> CatalogSource:
    """
    Create the catalog backend named in the config.

    Raises:
        VirtualTVError: If the backend is unknown or not fully configured.
    """
    backend = config.backend.lower()

    if backend == "memory":
        if config.library_file:
            return InMemoryCatalog.from_file(config.library_file)
        logger.warning("No library file configured; starting with an empty catalog")
        return InMemoryCatalog()

    if backend == "jellyfin":
        jellyfin = config.jellyfin
        if not jellyfin.url or not jellyfin.api_key:
            raise VirtualTVError("Jellyfin catalog requires url and api_key")
        return JellyfinCatalog(
            server_url=jellyfin.url,
            api_key=str(jellyfin.api_key),
            user_id=jellyfin.user_id,
            timeout=jellyfin.timeout,
        )

    raise VirtualTVError(f"Unknown catalog backend: {config.backend}")


class VirtualChannelService:
    """
    Runs all virtual channels.

    Usage:
        service = VirtualChannelService(config, catalog)
        await service.start()
        result = await service.guide()
        playback = await service.start_playback(1001)
        await service.stop()
    """

    def __init__(
        self,
        config: VirtualTVConfig,
        catalog: CatalogSource,
        launcher: Optional[StreamLauncher] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
        scheduler: Optional[TaskScheduler] = None,
    ):
        self.config = config
        self.catalog = catalog
        self.clock = clock

        playout = config.playout
        self.queue = ContentQueue(catalog, rng)
        self.planner = CommercialPlanner(self.queue, config.commercials.folder_path)
        self.builder = ScheduleBuilder(
            self.queue,
            self.planner,
            max_consecutive_skips=playout.max_consecutive_skips,
            max_programs_per_channel=playout.max_programs_per_channel,
        )
        self.timeline = ChannelTimeline(self.builder)
        self.state_store = ChannelStateStore(clock)
        self.playback = PlaybackStarter(self.timeline, self.state_store, launcher)
        self.auto_generator = AutoChannelGenerator(catalog, config.auto_channels)
        self.scheduler = scheduler or TaskScheduler()

        self._channels: List[ChannelPolicy] = list(config.channels)

    # Channels

    @property
    def channels(self) -> List[ChannelPolicy]:
        return list(self._channels)

    @property
    def enabled_channels(self) -> List[ChannelPolicy]:
        return [channel for channel in self._channels if channel.enabled]

    async def set_channels(self, channels: Iterable[ChannelPolicy]) -> None:
        """
        Replace the channel list.

        Channels that were removed or whose policy changed lose their queue,
        committed timeline, and live state.
        """
        new_channels = list(channels)
        new_by_id = {channel.channel_id: channel for channel in new_channels}

        for old in self._channels:
            if new_by_id.get(old.channel_id) != old:
                await self._discard_channel(old.channel_id)

        self._channels = new_channels
        logger.info(f"Channel list updated: {len(new_channels)} channels")

    def get_channel(self, number: int) -> ChannelPolicy:
        """Get a channel by number, raising ChannelNotFoundError."""
        for channel in self._channels:
            if channel.number == number:
                return channel
        raise ChannelNotFoundError(number)

    def get_channel_by_id(self, channel_id: str) -> ChannelPolicy:
        for channel in self._channels:
            if channel.channel_id == channel_id:
                return channel
        raise ChannelNotFoundError(channel_id)

    async def _discard_channel(self, channel_id: str) -> None:
        await self.timeline.reset(channel_id)
        self.queue.clear(channel_id)
        self.state_store.clear(channel_id)

    # Guide

    def guide_window(self) -> timedelta:
        return timedelta(days=self.config.playout.epg_days_ahead)

    async def guide(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GuideBuildResult:
        """
        Get the program guide for all enabled channels.

        Programs come from the committed timelines, which are extended as
        needed, so overlapping requests see the same programs.

        Args:
            start: Window start; defaults to now.
            end: Window end; defaults to start plus epg_days_ahead.
            cancel_event: Stops timeline extension early when set.
        """
        now = self.clock()
        start = start or now
        end = end or start + self.guide_window()

        result = await self._extend(self.enabled_channels, end, min(start, now), cancel_event)
        result.programs = {
            channel.channel_id: self.timeline.programs_between(channel.channel_id, start, end)
            for channel in self.enabled_channels
        }

        for channel in self.enabled_channels:
            current = self.timeline.program_at(channel.channel_id, now)
            if current is not None:
                self.state_store.set_current_program(channel.channel_id, current)
            else:
                self.state_store.get_or_create(channel.channel_id)

        return result

    async def xmltv(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> str:
        """Render the guide as an XMLTV document."""
        result = await self.guide(start, end)
        for channel_id, error in result.errors.items():
            logger.warning(f"Guide for {channel_id} is incomplete: {error}")
        return build_xmltv(self.channels, result.programs)

    def m3u_playlist(self, base_url: Optional[str] = None) -> str:
        return master_playlist(self._channels, base_url or self.config.server.base_url)

    def channel_playlist(self, number: int, base_url: Optional[str] = None) -> str:
        channel = self.get_channel(number)
        return channel_playlist(channel, base_url or self.config.server.base_url)

    async def extend_horizons(
        self,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GuideBuildResult:
        """
        Extend every enabled channel's timeline to epg_days_ahead from now.

        Returns:
            GuideBuildResult holding only the newly committed programs.
        """
        now = self.clock()
        return await self._extend(
            self.enabled_channels, now + self.guide_window(), now, cancel_event
        )

    async def refresh(self, channel_id: Optional[str] = None) -> GuideBuildResult:
        """
        Rebuild one channel, or every channel, from fresh queues.

        Raises:
            ChannelNotFoundError: If channel_id is not configured.
        """
        if channel_id is not None:
            channel = self.get_channel_by_id(channel_id)
            await self.timeline.reset(channel_id)
            self.queue.clear(channel_id)
            self.state_store.set_current_program(channel_id, None)
            logger.info(f"Refreshing channel {channel_id}")
            now = self.clock()
            return await self._extend([channel], now + self.guide_window(), now)

        await self.timeline.reset_all()
        self.queue.clear_all()
        for channel in self._channels:
            self.state_store.set_current_program(channel.channel_id, None)
        logger.info("Refreshing all channels")
        return await self.extend_horizons()

    async def _extend(
        self,
        channels: List[ChannelPolicy],
        until: datetime,
        anchor: datetime,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GuideBuildResult:
        result = GuideBuildResult()

        async def extend_one(channel: ChannelPolicy) -> None:
            try:
                result.programs[channel.channel_id] = await self.timeline.ensure_horizon(
                    channel, until, anchor, cancel_event
                )
            except Exception as e:
                logger.exception(f"Error extending timeline for channel {channel.name}: {e}")
                result.programs[channel.channel_id] = []
                result.errors[channel.channel_id] = str(e)

        await asyncio.gather(*(extend_one(channel) for channel in channels))
        result.cancelled = bool(cancel_event and cancel_event.is_set())
        return result

    # Playback

    async def now_playing(
        self,
        number: int,
        now: Optional[datetime] = None,
    ) -> Optional[PlaybackStart]:
        """Get the program and segment on air for a channel."""
        channel = self.get_channel(number)
        now = now or self.clock()
        await self.timeline.ensure_horizon(channel, now + PLAYBACK_LOOKAHEAD, now)
        return self.playback.resolve(channel.channel_id, now)

    async def start_playback(
        self,
        number: int,
        now: Optional[datetime] = None,
    ) -> Optional[PlaybackStart]:
        """
        Start streaming a channel from its current position.

        Returns None when the channel has nothing to play.
        """
        channel = self.get_channel(number)
        now = now or self.clock()
        await self.timeline.ensure_horizon(channel, now + PLAYBACK_LOOKAHEAD, now)
        return await self.playback.start(channel.channel_id, now)

    async def stop_playback(self, number: int) -> None:
        channel = self.get_channel(number)
        await self.playback.stop(channel.channel_id)

    # Health

    def statistics(self) -> ChannelStatistics:
        return self.state_store.statistics()

    async def maintenance(self) -> Dict[str, Any]:
        """Log channel statistics and drop programs past the history window."""
        stats = self.statistics()
        logger.info(
            f"Channel stats: {stats.total_channels} total, "
            f"{stats.streaming_channels} streaming, {stats.active_channels} active"
        )

        cutoff = self.clock() - timedelta(hours=self.config.playout.history_retention_hours)
        trimmed = 0
        for channel_id in self.timeline.channel_ids():
            trimmed += await self.timeline.trim(channel_id, cutoff)
        if trimmed:
            logger.info(f"Trimmed {trimmed} programs that ended before {cutoff}")

        return {"statistics": stats.to_dict(), "trimmed_programs": trimmed}

    # Auto channels

    async def update_auto_channels(self) -> List[ChannelPolicy]:
        """Regenerate genre and decade channels from the catalog."""
        channels = await self.auto_generator.update_channels(self._channels)
        await self.set_channels(channels)
        return self.channels

    async def list_genres(self) -> List[Dict[str, Any]]:
        """Get genres in the catalog with their item counts."""
        items = await self.catalog.query(ContentFilter.all())
        counts: Counter = Counter()
        for item in items:
            for genre in set(item.genres):
                counts[genre] += 1
        return [{"genre": genre, "count": counts[genre]} for genre in sorted(counts)]

    # Lifecycle

    async def start(self) -> None:
        """Generate auto channels and start the periodic tasks."""
        auto = self.config.auto_channels
        playout = self.config.playout

        if auto.enabled:
            try:
                await self.update_auto_channels()
            except CatalogError as e:
                logger.warning(f"Auto channel generation failed: {e}")
            self.scheduler.add_task(
                "auto_channels", self.update_auto_channels, auto.update_interval
            )

        self.scheduler.add_task(
            "guide_refresh",
            self.extend_horizons,
            playout.guide_refresh_interval,
            run_immediately=True,
        )
        self.scheduler.add_task("maintenance", self.maintenance, playout.maintenance_interval)

        await self.scheduler.start()
        logger.info(f"Virtual channel service started with {len(self._channels)} channels")

    async def stop(self) -> None:
        """Stop periodic tasks and any streaming channels."""
        await self.scheduler.stop()

        for channel_id, state in self.state_store.snapshot_all().items():
            if state.streaming:
                await self.playback.stop(channel_id)

        await self.catalog.close()
        logger.info("Virtual channel service stopped")
