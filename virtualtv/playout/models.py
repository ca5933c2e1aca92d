"""
Schedule data model.

Segments make up a program; programs make up a channel's timeline.
Both are immutable once built.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from virtualtv.library.base import ContentItem


class SegmentKind(str, Enum):
    """Type of segment within a program."""

    CONTENT = "content"
    COMMERCIAL = "commercial"
    PRE_ROLL = "pre_roll"
    POST_ROLL = "post_roll"


@dataclass(frozen=True)
class ScheduledSegment:
    """
    One atomic piece of a program's timeline.

    For content chunks, start_offset is the position within the source item
    where the chunk begins. Commercials always start at zero.
    """

    kind: SegmentKind
    item: ContentItem
    duration: timedelta
    start_offset: timedelta = timedelta(0)

    @property
    def end_offset(self) -> timedelta:
        """Position in the source item where this segment ends."""
        return self.start_offset + self.duration

    @property
    def is_commercial(self) -> bool:
        return self.kind in (SegmentKind.COMMERCIAL, SegmentKind.PRE_ROLL, SegmentKind.POST_ROLL)


def total_duration(segments: Sequence[ScheduledSegment]) -> timedelta:
    """Sum of segment durations."""
    return sum((segment.duration for segment in segments), timedelta(0))


@dataclass(frozen=True)
class ScheduledProgram:
    """
    A scheduled occupant of a channel's timeline.

    end_time - start_time always equals the sum of segment durations.
    """

    id: str
    item: ContentItem
    start_time: datetime
    end_time: datetime
    channel_id: str
    segments: Tuple[ScheduledSegment, ...] = ()

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def commercial_count(self) -> int:
        return sum(1 for segment in self.segments if segment.is_commercial)

    def covers(self, at: datetime) -> bool:
        """Check if the program is on air at the given instant."""
        return self.start_time <= at < self.end_time

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if the program intersects [start, end)."""
        return self.start_time < end and self.end_time > start

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "channel_id": self.channel_id,
            "item_id": self.item.id,
            "title": self.item.display_title,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": self.duration.total_seconds(),
            "segment_count": len(self.segments),
            "commercial_count": self.commercial_count,
        }


@dataclass
class GuideBuildResult:
    """Result of building a program guide."""

    programs: Dict[str, List[ScheduledProgram]] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def program_count(self) -> int:
        return sum(len(programs) for programs in self.programs.values())

    def for_channel(self, channel_id: str) -> List[ScheduledProgram]:
        return self.programs.get(channel_id, [])


@dataclass
class ChannelState:
    """
    Live state of a channel.

    Owned by ChannelStateStore; callers receive copies.
    """

    channel_id: str
    last_update: datetime
    current_program: Optional[ScheduledProgram] = None
    streaming: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel_id": self.channel_id,
            "streaming": self.streaming,
            "last_update": self.last_update.isoformat(),
            "current_program": (
                self.current_program.to_dict() if self.current_program else None
            ),
        }
