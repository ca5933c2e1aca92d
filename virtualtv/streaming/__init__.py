"""
Channel state and playback.

Tracks live channel state and resolves join-in-progress positions for
viewers tuning in.
"""

from virtualtv.streaming.channel_state import ChannelStateStore, ChannelStatistics, utc_now
from virtualtv.streaming.playback import PlaybackStart, PlaybackStarter, StreamLauncher

__all__ = [
    "ChannelStateStore",
    "ChannelStatistics",
    "PlaybackStart",
    "PlaybackStarter",
    "StreamLauncher",
    "utc_now",
]
