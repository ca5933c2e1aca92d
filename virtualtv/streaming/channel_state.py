"""
Channel state tracking.

Keeps the live state of every channel (current program, streaming flag,
last update) for playback, guide generation, and health reporting.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from virtualtv.playout.models import ChannelState, ScheduledProgram

logger = logging.getLogger(__name__)

ACTIVE_WINDOW = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChannelStatistics:
    """Aggregate channel counts for health reporting."""

    total_channels: int = 0
    streaming_channels: int = 0
    active_channels: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_channels": self.total_channels,
            "streaming_channels": self.streaming_channels,
            "active_channels": self.active_channels,
        }


class _Entry:
    """A channel's state and the lock guarding it."""

    __slots__ = ("lock", "state")

    def __init__(self, state: ChannelState):
        self.lock = threading.Lock()
        self.state = state


class ChannelStateStore:
    """
    Registry of per-channel live state.

    Mutations go through the accessors; readers always get copies. Each
    channel has its own lock, so updates to different channels never wait
    on each other. The store lock only covers adding and removing entries,
    and snapshots copy one entry at a time.

    Usage:
        store = ChannelStateStore()
        store.set_current_program("virtual_1001", program)
        store.set_streaming("virtual_1001", True)
        stats = store.statistics()
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _entry(self, channel_id: str) -> _Entry:
        """Get or create the entry for a channel."""
        entry = self._entries.get(channel_id)
        if entry is not None:
            return entry
        with self._lock:
            entry = self._entries.get(channel_id)
            if entry is None:
                entry = _Entry(ChannelState(channel_id=channel_id, last_update=self._clock()))
                self._entries[channel_id] = entry
            return entry

    def get_or_create(self, channel_id: str) -> ChannelState:
        """Get the state for a channel, creating it if needed."""
        entry = self._entry(channel_id)
        with entry.lock:
            return replace(entry.state)

    def set_current_program(self, channel_id: str, program: Optional[ScheduledProgram]) -> None:
        """Update the current program for a channel."""
        entry = self._entry(channel_id)
        with entry.lock:
            entry.state.current_program = program
            entry.state.last_update = self._clock()

        logger.debug(
            f"Updated current program for channel {channel_id}: "
            f"{program.item.name if program else 'None'}"
        )

    def get_current_program(self, channel_id: str) -> Optional[ScheduledProgram]:
        """Get the current program for a channel, or None."""
        entry = self._entries.get(channel_id)
        if entry is None:
            return None
        with entry.lock:
            return entry.state.current_program

    def set_streaming(self, channel_id: str, streaming: bool) -> None:
        """Set the streaming flag for a channel."""
        entry = self._entry(channel_id)
        with entry.lock:
            entry.state.streaming = streaming
            entry.state.last_update = self._clock()

        logger.info(f"Channel {channel_id} streaming state: {streaming}")

    def is_streaming(self, channel_id: str) -> bool:
        """Check if a channel is currently streaming."""
        entry = self._entries.get(channel_id)
        if entry is None:
            return False
        with entry.lock:
            return entry.state.streaming

    def snapshot_all(self) -> Dict[str, ChannelState]:
        """
        Get a copy of every channel's state.

        Each entry is copied under its own lock; the copy is consistent per
        channel, not across channels.
        """
        with self._lock:
            entries = list(self._entries.items())

        snapshot: Dict[str, ChannelState] = {}
        for channel_id, entry in entries:
            with entry.lock:
                snapshot[channel_id] = replace(entry.state)
        return snapshot

    def clear(self, channel_id: str) -> None:
        """Remove the state for a channel."""
        with self._lock:
            removed = self._entries.pop(channel_id, None)
        if removed is not None:
            logger.info(f"Cleared state for channel {channel_id}")

    def clear_all(self) -> None:
        """Remove all channel states."""
        with self._lock:
            self._entries.clear()
        logger.info("Cleared all channel states")

    def statistics(self, now: Optional[datetime] = None) -> ChannelStatistics:
        """
        Get statistics about channel states.

        A channel is active if it was updated within the last five minutes
        of `now` (defaults to the store clock).
        """
        observed = now or self._clock()
        states = self.snapshot_all()
        cutoff = observed - ACTIVE_WINDOW

        return ChannelStatistics(
            total_channels=len(states),
            streaming_channels=sum(1 for s in states.values() if s.streaming),
            active_channels=sum(1 for s in states.values() if s.last_update > cutoff),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
