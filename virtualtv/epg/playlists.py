"""M3U playlists for virtual channels."""

from typing import Iterable

from virtualtv.config import ChannelPolicy


def stream_url(channel: ChannelPolicy, base_url: str) -> str:
    """Get the HLS stream location for a channel."""
    return f"{base_url.rstrip('/')}/virtualchannels/{channel.number}/stream.m3u8"


def _extinf(channel: ChannelPolicy) -> str:
    line = f'#EXTINF:-1 tvg-id="{channel.channel_id}" tvg-chno="{channel.number}"'
    if channel.logo_path:
        line += f' tvg-logo="{channel.logo_path}"'
    return f"{line},{channel.name}\n"


def channel_playlist(channel: ChannelPolicy, base_url: str) -> str:
    """Build an M3U playlist for a single channel."""
    return "#EXTM3U\n" + _extinf(channel) + stream_url(channel, base_url) + "\n"


def master_playlist(channels: Iterable[ChannelPolicy], base_url: str) -> str:
    """Build an M3U playlist for every enabled channel."""
    content = "#EXTM3U\n"
    for channel in sorted(channels, key=lambda c: c.number):
        if not channel.enabled:
            continue
        content += _extinf(channel)
        content += stream_url(channel, base_url) + "\n"
    return content
