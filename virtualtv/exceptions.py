"""Exception types raised by VirtualTV."""


class VirtualTVError(Exception):
    """Base class for VirtualTV errors."""


class CatalogError(VirtualTVError):
    """Raised when the content catalog cannot be queried."""


class ChannelNotFoundError(VirtualTVError):
    """Raised when a channel number or id is not configured."""

    def __init__(self, channel: object):
        super().__init__(f"Channel {channel} not found")
        self.channel = channel
