"""
VirtualTV Playout Engine

Linear channel scheduling on top of an on-demand catalog.

Features:
- Per-channel content queues with low-water-mark refill
- Commercial break planning (pre-roll and mid-roll)
- Contiguous program schedules over a time window
- Committed per-channel timelines extended as time advances
- Join-in-progress segment lookup
"""

from virtualtv.playout.builder import ScheduleBuilder
from virtualtv.playout.commercials import CommercialPlanner
from virtualtv.playout.horizon import ChannelTimeline
from virtualtv.playout.models import (
    ChannelState,
    GuideBuildResult,
    ScheduledProgram,
    ScheduledSegment,
    SegmentKind,
    total_duration,
)
from virtualtv.playout.queue import ContentQueue
from virtualtv.playout.timeline import SegmentPosition, TimelineIndex

__all__ = [
    # Queue
    "ContentQueue",
    # Commercials
    "CommercialPlanner",
    # Builder
    "ScheduleBuilder",
    "ChannelTimeline",
    # Lookup
    "TimelineIndex",
    "SegmentPosition",
    # Models
    "ChannelState",
    "GuideBuildResult",
    "ScheduledProgram",
    "ScheduledSegment",
    "SegmentKind",
    "total_duration",
]
