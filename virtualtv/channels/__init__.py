"""Channel generation."""

from virtualtv.channels.auto_generator import AutoChannelGenerator

__all__ = ["AutoChannelGenerator"]
