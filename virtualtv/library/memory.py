"""
In-memory catalog.

Holds a fixed list of items, optionally loaded from a YAML library file.
Useful for local setups without a media server and for tests.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from virtualtv.library.base import (
    CatalogError,
    CatalogSource,
    ContentFilter,
    ContentItem,
    POOL_ITEM_TYPES,
    ItemType,
    SortOrder,
    natural_sort_key,
)

logger = logging.getLogger(__name__)


class InMemoryCatalog(CatalogSource):
    """Catalog backed by a list of ContentItem."""

    def __init__(self, items: Optional[Iterable[ContentItem]] = None):
        self._items: List[ContentItem] = list(items or [])

    @property
    def items(self) -> List[ContentItem]:
        return list(self._items)

    def add(self, item: ContentItem) -> None:
        """Add an item to the catalog."""
        self._items.append(item)

    async def query(
        self,
        content_filter: ContentFilter,
        sort: Optional[SortOrder] = None,
    ) -> List[ContentItem]:
        matched = [
            item for item in self._items
            if item.is_playable and content_filter.matches(item)
        ]
        if sort == SortOrder.NATURAL:
            matched.sort(key=natural_sort_key)
        return matched

    async def query_path(self, path: str) -> List[ContentItem]:
        if not path:
            return []
        prefix = path.rstrip("/") + "/"
        return [
            item for item in self._items
            if item.item_type in POOL_ITEM_TYPES
            and item.path
            and item.path.startswith(prefix)
            and item.has_duration
        ]

    @classmethod
    def from_file(cls, library_file: str) -> "InMemoryCatalog":
        """
        Load a catalog from a YAML library file.

        The file holds a top-level ``items`` list; each entry uses the
        ContentItem field names with ``duration`` given in seconds.

        Raises:
            CatalogError: If the file is missing or malformed.
        """
        path = Path(library_file)
        if not path.exists():
            raise CatalogError(f"Library file not found: {library_file}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            items = [_item_from_dict(entry) for entry in data.get("items", [])]
        except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid library file {library_file}: {e}") from e

        logger.info(f"Loaded {len(items)} items from {library_file}")
        return cls(items)


def _item_from_dict(entry: Dict[str, Any]) -> ContentItem:
    """Build a ContentItem from a library file entry."""
    seconds = entry.get("duration")
    return ContentItem(
        id=str(entry["id"]),
        name=entry.get("name", "Untitled"),
        duration=timedelta(seconds=float(seconds)) if seconds is not None else None,
        path=entry.get("path"),
        item_type=ItemType(entry.get("item_type", "movie")),
        overview=entry.get("overview"),
        series_id=entry.get("series_id"),
        series_name=entry.get("series_name"),
        season_number=entry.get("season_number"),
        episode_number=entry.get("episode_number"),
        genres=tuple(entry.get("genres", [])),
        tags=tuple(entry.get("tags", [])),
        year=entry.get("year"),
    )
