"""
Commercial break planning.

Splits one content item into chunks with commercial breaks between them:

    [pre-roll ...] [content, commercial x3]* [content]

No break is placed within the final five minutes of an item, and items
shorter than ten minutes are never broken up.
"""

import logging
from datetime import timedelta
from typing import List

from virtualtv.config import ChannelPolicy
from virtualtv.library.base import ContentItem
from virtualtv.playout.models import ScheduledSegment, SegmentKind, total_duration
from virtualtv.playout.queue import ContentQueue

logger = logging.getLogger(__name__)

MIN_BREAKABLE_DURATION = timedelta(minutes=10)
END_GUARD = timedelta(minutes=5)


class CommercialPlanner:
    """
    Builds the segment list for a content item.

    Commercials are drawn from the pool at commercial_path through the
    content queue. An empty path disables commercials; content is still
    split at the break positions.
    """

    PRE_ROLL_COUNT = 2
    MID_ROLL_COUNT = 3

    def __init__(self, queue: ContentQueue, commercial_path: str = ""):
        self.queue = queue
        self.commercial_path = commercial_path

    async def build_segments(
        self,
        item: ContentItem,
        policy: ChannelPolicy,
    ) -> List[ScheduledSegment]:
        """
        Build a segment list covering an item end-to-end.

        Args:
            item: Main content item.
            policy: Channel policy (pre-roll flag, break interval).

        Returns:
            Ordered segments, or an empty list if the item has no usable
            duration.
        """
        if not item.has_duration:
            logger.warning(f"Content {item.name} has no valid runtime")
            return []

        segments: List[ScheduledSegment] = []

        # Pre-roll commercials
        if policy.enable_pre_rolls and self.commercial_path:
            pre_rolls = await self.queue.commercials(self.commercial_path, self.PRE_ROLL_COUNT)
            segments.extend(
                self._commercial_segment(commercial, SegmentKind.PRE_ROLL)
                for commercial in pre_rolls
            )

        duration = item.duration
        positions = self.break_positions(duration, policy.commercial_interval)

        cursor = timedelta(0)
        for position in positions:
            segments.append(
                ScheduledSegment(
                    kind=SegmentKind.CONTENT,
                    item=item,
                    start_offset=cursor,
                    duration=position - cursor,
                )
            )

            if self.commercial_path:
                mid_rolls = await self.queue.commercials(self.commercial_path, self.MID_ROLL_COUNT)
                segments.extend(
                    self._commercial_segment(commercial, SegmentKind.COMMERCIAL)
                    for commercial in mid_rolls
                )

            cursor = position

        # Remaining content
        if cursor < duration:
            segments.append(
                ScheduledSegment(
                    kind=SegmentKind.CONTENT,
                    item=item,
                    start_offset=cursor,
                    duration=duration - cursor,
                )
            )

        logger.info(
            f"Built playlist for {item.name} with {len(segments)} segments "
            f"({len(positions)} commercial breaks)"
        )
        return segments

    @staticmethod
    def break_positions(duration: timedelta, interval: timedelta) -> List[timedelta]:
        """
        Calculate mid-roll break positions.

        Positions start at the interval and step by it, stopping before
        the final five minutes of the item.
        """
        positions: List[timedelta] = []

        # Don't insert commercials if content is too short
        if duration < MIN_BREAKABLE_DURATION or interval <= timedelta(0):
            return positions

        max_position = duration - END_GUARD
        position = interval
        while position < max_position:
            positions.append(position)
            position += interval

        return positions

    @staticmethod
    def total_duration(segments: List[ScheduledSegment]) -> timedelta:
        """Calculate the total duration including commercials."""
        return total_duration(segments)

    @staticmethod
    def _commercial_segment(commercial: ContentItem, kind: SegmentKind) -> ScheduledSegment:
        return ScheduledSegment(kind=kind, item=commercial, duration=commercial.duration)
