"""
Content catalog access.

Backends:
- InMemoryCatalog: fixed item list or YAML library file
- JellyfinCatalog: Jellyfin/Emby item API
"""

from virtualtv.library.base import (
    CatalogError,
    CatalogSource,
    ContentFilter,
    ContentItem,
    FilterKind,
    ItemType,
    SortOrder,
)
from virtualtv.library.jellyfin import JellyfinCatalog
from virtualtv.library.memory import InMemoryCatalog

__all__ = [
    "CatalogError",
    "CatalogSource",
    "ContentFilter",
    "ContentItem",
    "FilterKind",
    "ItemType",
    "SortOrder",
    "InMemoryCatalog",
    "JellyfinCatalog",
]
