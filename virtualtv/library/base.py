"""
Catalog types shared by the scheduling engine and catalog backends.

The catalog is the on-demand library channels draw from. The engine only
ever reads from it through CatalogSource.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional, Tuple

from virtualtv.exceptions import CatalogError

logger = logging.getLogger(__name__)

__all__ = [
    "CatalogError",
    "CatalogSource",
    "ContentFilter",
    "ContentItem",
    "FilterKind",
    "ItemType",
    "SortOrder",
]


class ItemType(str, Enum):
    """Kind of catalog item."""

    MOVIE = "movie"
    EPISODE = "episode"
    VIDEO = "video"


# Item types a commercial folder may contribute
POOL_ITEM_TYPES = frozenset({ItemType.MOVIE, ItemType.VIDEO})


class FilterKind(str, Enum):
    """How a channel selects content from the catalog."""

    ALL = "all"
    GENRE = "genre"
    YEAR_RANGE = "year_range"
    SERIES = "series"
    TAG = "tag"
    NOTHING = "nothing"  # invalid filter input, matches no items


class SortOrder(str, Enum):
    """Ordering requested from the catalog."""

    NATURAL = "natural"  # season (parent index), then episode (index)


@dataclass(frozen=True)
class ContentItem:
    """A playable item in the catalog. Read-only to the engine."""

    id: str
    name: str
    duration: Optional[timedelta] = None
    path: Optional[str] = None
    item_type: ItemType = ItemType.MOVIE
    overview: Optional[str] = None

    # Series / episode metadata
    series_id: Optional[str] = None
    series_name: Optional[str] = None
    season_number: Optional[int] = None
    episode_number: Optional[int] = None

    genres: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    year: Optional[int] = None

    @property
    def has_duration(self) -> bool:
        """Check if the item has a known, positive duration."""
        return self.duration is not None and self.duration > timedelta(0)

    @property
    def is_playable(self) -> bool:
        """Check if the item can be scheduled (media path and duration)."""
        return bool(self.path) and self.has_duration

    @property
    def display_title(self) -> str:
        """Get formatted display title."""
        if (
            self.item_type == ItemType.EPISODE
            and self.season_number is not None
            and self.episode_number is not None
        ):
            return (
                f"{self.series_name or self.name} "
                f"S{self.season_number:02d}E{self.episode_number:02d} - {self.name}"
            )
        if self.year:
            return f"{self.name} ({self.year})"
        return self.name


@dataclass(frozen=True)
class ContentFilter:
    """
    Typed content-selection filter.

    Built from a channel policy. Backends translate it into their own
    query language.
    """

    kind: FilterKind = FilterKind.ALL
    genres: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    series_id: Optional[str] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None

    @classmethod
    def all(cls) -> "ContentFilter":
        return cls(kind=FilterKind.ALL)

    @classmethod
    def nothing(cls) -> "ContentFilter":
        return cls(kind=FilterKind.NOTHING)

    @classmethod
    def by_genres(cls, genres: List[str]) -> "ContentFilter":
        return cls(kind=FilterKind.GENRE, genres=tuple(genres))

    @classmethod
    def by_tags(cls, tags: List[str]) -> "ContentFilter":
        return cls(kind=FilterKind.TAG, tags=tuple(tags))

    @classmethod
    def by_series(cls, series_id: str) -> "ContentFilter":
        return cls(kind=FilterKind.SERIES, series_id=series_id)

    @classmethod
    def by_years(cls, year_from: int, year_to: int) -> "ContentFilter":
        return cls(kind=FilterKind.YEAR_RANGE, year_from=year_from, year_to=year_to)

    def matches(self, item: ContentItem) -> bool:
        """Check if an item satisfies this filter."""
        if self.kind == FilterKind.NOTHING:
            return False
        if self.kind == FilterKind.ALL:
            return item.item_type in (ItemType.MOVIE, ItemType.EPISODE)
        if self.kind == FilterKind.GENRE:
            wanted = {g.lower() for g in self.genres}
            return (
                item.item_type in (ItemType.MOVIE, ItemType.EPISODE)
                and any(g.lower() in wanted for g in item.genres)
            )
        if self.kind == FilterKind.TAG:
            wanted = {t.lower() for t in self.tags}
            return (
                item.item_type in (ItemType.MOVIE, ItemType.EPISODE)
                and any(t.lower() in wanted for t in item.tags)
            )
        if self.kind == FilterKind.SERIES:
            return item.item_type == ItemType.EPISODE and item.series_id == self.series_id
        if self.kind == FilterKind.YEAR_RANGE:
            return (
                item.item_type == ItemType.MOVIE
                and item.year is not None
                and self.year_from <= item.year <= self.year_to
            )
        return False


def natural_sort_key(item: ContentItem) -> Tuple[int, int]:
    """Sort key for season/episode order; unnumbered items sort last."""
    big = 1 << 30
    season = item.season_number if item.season_number is not None else big
    episode = item.episode_number if item.episode_number is not None else big
    return (season, episode)


class CatalogSource(ABC):
    """
    Abstract content catalog.

    Implementations return only playable items (resolvable path and
    positive duration) and raise CatalogError when the backing store
    cannot be reached.
    """

    @abstractmethod
    async def query(
        self,
        content_filter: ContentFilter,
        sort: Optional[SortOrder] = None,
    ) -> List[ContentItem]:
        """
        Query items matching a filter.

        Args:
            content_filter: Selection filter.
            sort: Optional ordering; unordered when None.

        Returns:
            Matching playable items.
        """
        pass

    @abstractmethod
    async def query_path(self, path: str) -> List[ContentItem]:
        """
        Query movie and video items stored under a folder path.

        Used for the commercial pool; episodes and items without a duration
        are left out.
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
