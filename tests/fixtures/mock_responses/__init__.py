"""
Mock API Responses

Pre-defined mock responses for external service testing.
"""

from .jellyfin_responses import (
    JELLYFIN_COMMERCIALS,
    JELLYFIN_EPISODES,
    JELLYFIN_ITEMS,
)

__all__ = [
    "JELLYFIN_COMMERCIALS",
    "JELLYFIN_EPISODES",
    "JELLYFIN_ITEMS",
]
