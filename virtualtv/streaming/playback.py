"""
Join-in-progress playback.

Works out which segment of a channel's schedule is on air and how far into
it a newly tuned viewer should start, then hands the item and offset to a
stream launcher.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from virtualtv.library.base import ContentItem
from virtualtv.playout.horizon import ChannelTimeline
from virtualtv.playout.models import ScheduledProgram
from virtualtv.playout.timeline import SegmentPosition, TimelineIndex
from virtualtv.streaming.channel_state import ChannelStateStore

logger = logging.getLogger(__name__)


class StreamLauncher(ABC):
    """
    Hands content to the transcoding subsystem.

    Implementations turn an item and start offset into a continuously
    playable stream and return its playlist location.
    """

    @abstractmethod
    async def launch(self, item: ContentItem, channel_id: str, offset: timedelta) -> str:
        """Start streaming an item from an offset."""
        pass

    @abstractmethod
    async def stop(self, channel_id: str) -> None:
        """Stop a channel's stream."""
        pass


@dataclass(frozen=True)
class PlaybackStart:
    """Where a viewer joins a channel."""

    channel_id: str
    program: ScheduledProgram
    position: SegmentPosition
    stream_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        segment = self.position.segment
        return {
            "channel_id": self.channel_id,
            "program": self.program.to_dict(),
            "segment": {
                "index": self.position.index,
                "kind": segment.kind.value,
                "item_id": segment.item.id,
                "title": segment.item.name,
                "duration_seconds": segment.duration.total_seconds(),
            },
            "offset_seconds": self.position.offset.total_seconds(),
            "item_offset_seconds": self.position.item_offset.total_seconds(),
            "stream_url": self.stream_url,
        }


class PlaybackStarter:
    """Resolves the on-air segment for a channel and starts its stream."""

    def __init__(
        self,
        timeline: ChannelTimeline,
        state_store: ChannelStateStore,
        launcher: Optional[StreamLauncher] = None,
    ):
        self.timeline = timeline
        self.state_store = state_store
        self.launcher = launcher

    def resolve(self, channel_id: str, now: datetime) -> Optional[PlaybackStart]:
        """
        Find the program and segment on air for a channel.

        Prefers the channel's current program and falls back to the
        committed timeline when that program is not on air.
        """
        program = self.state_store.get_current_program(channel_id)
        if program is None or not program.covers(now):
            program = self.timeline.program_at(channel_id, now)

        if program is None:
            logger.warning(f"Nothing scheduled on channel {channel_id} at {now}")
            return None

        position = TimelineIndex.locate_in_program(program, now)
        if position is None:
            return None

        return PlaybackStart(channel_id=channel_id, program=program, position=position)

    async def start(self, channel_id: str, now: datetime) -> Optional[PlaybackStart]:
        """
        Start playback for a channel at the current position.

        Returns:
            PlaybackStart, or None if nothing is scheduled (the channel
            does not transition to streaming).
        """
        playback = self.resolve(channel_id, now)
        if playback is None:
            return None

        self.state_store.set_current_program(channel_id, playback.program)

        if self.launcher is not None:
            segment = playback.position.segment
            logger.info(
                f"Starting {segment.item.name} on channel {channel_id} "
                f"at {playback.position.item_offset}"
            )
            stream_url = await self.launcher.launch(
                segment.item, channel_id, playback.position.item_offset
            )
            playback = PlaybackStart(
                channel_id=channel_id,
                program=playback.program,
                position=playback.position,
                stream_url=stream_url,
            )

        self.state_store.set_streaming(channel_id, True)
        return playback

    async def stop(self, channel_id: str) -> None:
        """Stop playback for a channel."""
        if self.launcher is not None:
            await self.launcher.stop(channel_id)
        self.state_store.set_streaming(channel_id, False)
