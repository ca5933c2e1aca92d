"""
Time-offset lookup within programs.

Answers "what should be playing right now" for a viewer tuning in to a
program that is already in progress.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from virtualtv.playout.models import ScheduledProgram, ScheduledSegment


@dataclass(frozen=True)
class SegmentPosition:
    """A segment and the playback offset within it."""

    segment: ScheduledSegment
    offset: timedelta
    index: int

    @property
    def item_offset(self) -> timedelta:
        """Offset into the segment's source item (for content chunks)."""
        return self.segment.start_offset + self.offset

    @property
    def remaining(self) -> timedelta:
        return self.segment.duration - self.offset


class TimelineIndex:
    """Locates segments by elapsed time."""

    @staticmethod
    def locate(
        segments: Sequence[ScheduledSegment],
        elapsed: timedelta,
    ) -> Optional[SegmentPosition]:
        """
        Get the segment active at an elapsed offset.

        Args:
            segments: Ordered segments of a program.
            elapsed: Offset from the start of the first segment.

        Returns:
            SegmentPosition, or None if elapsed is negative or at/after the
            end of the last segment.
        """
        if elapsed < timedelta(0):
            return None

        running_start = timedelta(0)
        for index, segment in enumerate(segments):
            segment_end = running_start + segment.duration
            if running_start <= elapsed < segment_end:
                return SegmentPosition(
                    segment=segment,
                    offset=elapsed - running_start,
                    index=index,
                )
            running_start = segment_end

        return None

    @classmethod
    def locate_in_program(
        cls,
        program: ScheduledProgram,
        at: datetime,
    ) -> Optional[SegmentPosition]:
        """Get the segment of a program that is on air at an instant."""
        return cls.locate(program.segments, at - program.start_time)

    @staticmethod
    def program_at(
        programs: Sequence[ScheduledProgram],
        at: datetime,
    ) -> Optional[ScheduledProgram]:
        """Get the program covering an instant."""
        for program in programs:
            if program.covers(at):
                return program
        return None
