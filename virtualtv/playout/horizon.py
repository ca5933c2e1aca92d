"""
Committed per-channel timelines.

A channel's schedule is built once and extended as wall-clock time moves
forward. Guide and now-playing queries read the committed programs and
never consume queue items; only extending past the current horizon does.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from virtualtv.config import ChannelPolicy
from virtualtv.playout.builder import ScheduleBuilder
from virtualtv.playout.models import ScheduledProgram
from virtualtv.playout.timeline import TimelineIndex

logger = logging.getLogger(__name__)


class ChannelTimeline:
    """
    Append-only program timelines for all channels.

    Extension of a channel's timeline runs under that channel's lock.
    """

    def __init__(self, builder: ScheduleBuilder):
        self.builder = builder
        self._programs: Dict[str, List[ScheduledProgram]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, channel_id: str) -> asyncio.Lock:
        lock = self._locks.get(channel_id)
        if lock is None:
            lock = self._locks.setdefault(channel_id, asyncio.Lock())
        return lock

    def horizon(self, channel_id: str) -> Optional[datetime]:
        """Get the end time of the last committed program."""
        programs = self._programs.get(channel_id)
        return programs[-1].end_time if programs else None

    async def ensure_horizon(
        self,
        policy: ChannelPolicy,
        until: datetime,
        anchor: datetime,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[ScheduledProgram]:
        """
        Extend a channel's timeline until it covers `until`.

        Args:
            policy: Channel policy.
            until: Time the timeline must reach.
            anchor: Start time used when the timeline is empty, or when it
                ended before this time (a lapsed timeline is discarded).
            cancel_event: Stops extension early when set.

        Returns:
            The programs appended by this call.
        """
        channel_id = policy.channel_id
        async with self._lock_for(channel_id):
            programs = self._programs.setdefault(channel_id, [])

            if programs and programs[-1].end_time < anchor:
                logger.info(
                    f"Timeline for {channel_id} lapsed at {programs[-1].end_time}; "
                    f"restarting at {anchor}"
                )
                programs.clear()

            start = programs[-1].end_time if programs else anchor
            if start >= until:
                return []

            added: List[ScheduledProgram] = []
            try:
                await self.builder.build_channel(policy, start, until, cancel_event, added)
            finally:
                programs.extend(added)

            if added:
                logger.info(
                    f"Extended {channel_id} by {len(added)} programs "
                    f"to {programs[-1].end_time}"
                )
            return added

    def programs_between(
        self,
        channel_id: str,
        start: datetime,
        end: datetime,
    ) -> List[ScheduledProgram]:
        """Get committed programs overlapping [start, end)."""
        return [
            program for program in self._programs.get(channel_id, ())
            if program.overlaps(start, end)
        ]

    def program_at(self, channel_id: str, at: datetime) -> Optional[ScheduledProgram]:
        """Get the committed program on air at an instant."""
        return TimelineIndex.program_at(self._programs.get(channel_id, ()), at)

    async def trim(self, channel_id: str, before: datetime) -> int:
        """Drop programs that finished before a time. Returns the count removed."""
        async with self._lock_for(channel_id):
            programs = self._programs.get(channel_id)
            if not programs:
                return 0
            kept = [program for program in programs if program.end_time > before]
            removed = len(programs) - len(kept)
            programs[:] = kept
            return removed

    async def reset(self, channel_id: str) -> None:
        """
        Discard a channel's committed timeline.

        Waits for an extension in progress on the channel, so its programs
        are discarded with the rest instead of landing in a detached list.
        """
        async with self._lock_for(channel_id):
            if self._programs.pop(channel_id, None) is not None:
                logger.info(f"Reset timeline for channel {channel_id}")

    async def reset_all(self) -> None:
        """Discard every committed timeline."""
        for channel_id in list(self._programs):
            async with self._lock_for(channel_id):
                self._programs.pop(channel_id, None)
        logger.info("Reset all channel timelines")

    def channel_ids(self) -> List[str]:
        return list(self._programs)
