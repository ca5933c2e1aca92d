"""
VirtualTV - Linear channels from an on-demand library

Simulates cable-style television on top of a media catalog:
- Continuous per-channel content queues
- Commercial breaks (pre-roll and mid-roll)
- XMLTV program guide and M3U playlists
- Join-in-progress playback positions
"""

__version__ = "1.0.0"
__author__ = "VirtualTV Contributors"
__license__ = "MIT"

from virtualtv.config import VirtualTVConfig, load_config

__all__ = [
    "__version__",
    "VirtualTVConfig",
    "load_config",
]
