"""
Program schedule assembly.

Pulls items from the content queue, expands each into segments, and lays
the resulting programs end-to-end along the wall clock.
"""

import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from uuid import uuid4

from virtualtv.config import ChannelPolicy
from virtualtv.playout.commercials import CommercialPlanner
from virtualtv.playout.models import GuideBuildResult, ScheduledProgram, total_duration
from virtualtv.playout.queue import ContentQueue

logger = logging.getLogger(__name__)


class ScheduleBuilder:
    """
    Builds program schedules for channels.

    Channels are generated independently; a failure or an empty library on
    one channel never affects the others.
    """

    def __init__(
        self,
        queue: ContentQueue,
        planner: CommercialPlanner,
        max_consecutive_skips: int = 50,
        max_programs_per_channel: int = 5000,
    ):
        self.queue = queue
        self.planner = planner
        self.max_consecutive_skips = max_consecutive_skips
        self.max_programs_per_channel = max_programs_per_channel

    async def build_guide(
        self,
        policies: Iterable[ChannelPolicy],
        window_start: datetime,
        window_end: datetime,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GuideBuildResult:
        """
        Build programs for every enabled channel over a window.

        Args:
            policies: Channel policies; disabled channels are skipped.
            window_start: Start of the guide window.
            window_end: End of the guide window.
            cancel_event: Set to stop generation early. Programs built so
                far are returned.

        Returns:
            GuideBuildResult with programs and per-channel errors.
        """
        enabled = [policy for policy in policies if policy.enabled]
        logger.info(
            f"Building guide for {len(enabled)} channels "
            f"from {window_start} to {window_end}"
        )

        result = GuideBuildResult()
        channel_results = await asyncio.gather(*(
            self._build_channel_safe(policy, window_start, window_end, cancel_event)
            for policy in enabled
        ))

        for policy, (programs, error) in zip(enabled, channel_results):
            result.programs[policy.channel_id] = programs
            if error:
                result.errors[policy.channel_id] = error

        result.cancelled = bool(cancel_event and cancel_event.is_set())
        logger.info(
            f"Built {result.program_count} programs"
            + (" (cancelled)" if result.cancelled else "")
        )
        return result

    async def _build_channel_safe(
        self,
        policy: ChannelPolicy,
        start: datetime,
        end: datetime,
        cancel_event: Optional[asyncio.Event],
    ) -> Tuple[List[ScheduledProgram], Optional[str]]:
        """Build one channel, capturing failures as an error message."""
        programs: List[ScheduledProgram] = []
        try:
            await self.build_channel(policy, start, end, cancel_event, programs)
        except Exception as e:
            logger.exception(f"Error generating programs for channel {policy.name}: {e}")
            return programs, str(e)
        return programs, None

    async def build_channel(
        self,
        policy: ChannelPolicy,
        start: datetime,
        end: datetime,
        cancel_event: Optional[asyncio.Event] = None,
        programs: Optional[List[ScheduledProgram]] = None,
    ) -> List[ScheduledProgram]:
        """
        Build contiguous programs for one channel from start until end is
        covered.

        Args:
            policy: Channel policy.
            start: Start time of the first program.
            end: Generation stops once a program reaches this time.
            cancel_event: Checked before every item.
            programs: Optional list to append to, so callers keep partial
                output if generation raises.

        Returns:
            The programs built.
        """
        if programs is None:
            programs = []

        channel_id = policy.channel_id
        cursor = start
        skipped = 0

        while cursor < end:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Guide generation cancelled for channel {channel_id}")
                break

            if len(programs) >= self.max_programs_per_channel:
                logger.warning(
                    f"Channel {channel_id} reached {self.max_programs_per_channel} programs"
                )
                break

            item = await self.queue.next_item(channel_id, policy)
            if item is None:
                logger.warning(f"No content available for channel {policy.name}")
                break

            segments = await self.planner.build_segments(item, policy)
            if not segments:
                skipped += 1
                logger.warning(f"Skipping unschedulable item {item.name} on {channel_id}")
                if skipped >= self.max_consecutive_skips:
                    logger.error(
                        f"Channel {channel_id} stopped after {skipped} "
                        f"unschedulable items in a row"
                    )
                    break
                continue
            skipped = 0

            duration = total_duration(segments)
            programs.append(
                ScheduledProgram(
                    id=str(uuid4()),
                    item=item,
                    start_time=cursor,
                    end_time=cursor + duration,
                    channel_id=channel_id,
                    segments=tuple(segments),
                )
            )
            cursor += duration

        logger.debug(f"Built {len(programs)} programs for channel {channel_id}")
        return programs
