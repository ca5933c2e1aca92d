"""Program guide and playlist output."""

from virtualtv.epg.playlists import channel_playlist, master_playlist, stream_url
from virtualtv.epg.xmltv import build_xmltv, format_xmltv_time

__all__ = [
    "build_xmltv",
    "format_xmltv_time",
    "channel_playlist",
    "master_playlist",
    "stream_url",
]
