"""
Jellyfin catalog backend.

Queries a Jellyfin (or Emby) server's item API for channel content and the
commercial pool.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

import httpx

from virtualtv.library.base import (
    CatalogError,
    CatalogSource,
    ContentFilter,
    ContentItem,
    POOL_ITEM_TYPES,
    FilterKind,
    ItemType,
    SortOrder,
)

logger = logging.getLogger(__name__)

ITEM_FIELDS = "Path,Overview,Genres,Tags,ProductionYear,SeriesId,SeriesName"
PAGE_SIZE = 1000


class JellyfinCatalog(CatalogSource):
    """
    Catalog served by the Jellyfin item API.

    Features:
    - Genre, tag, year, and series filters pushed down to the server
    - Natural episode ordering (season, then episode)
    - Paged item retrieval
    """

    def __init__(
        self,
        server_url: str,
        api_key: str,
        user_id: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize JellyfinCatalog.

        Args:
            server_url: Jellyfin server URL.
            api_key: API key for authentication.
            user_id: Optional user whose view of the library is queried.
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client.
        """
        self.server_url = server_url.rstrip("/")
        self.api_key = api_key
        self.user_id = user_id
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def headers(self) -> Dict[str, str]:
        """Get HTTP headers for Jellyfin API requests."""
        return {
            "X-Emby-Token": self.api_key,
            "Accept": "application/json",
        }

    @property
    def items_url(self) -> str:
        if self.user_id:
            return f"{self.server_url}/Users/{self.user_id}/Items"
        return f"{self.server_url}/Items"

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def query(
        self,
        content_filter: ContentFilter,
        sort: Optional[SortOrder] = None,
    ) -> List[ContentItem]:
        if content_filter.kind == FilterKind.NOTHING:
            return []

        params = self._filter_params(content_filter)
        if sort == SortOrder.NATURAL:
            params["SortBy"] = "ParentIndexNumber,IndexNumber"
            params["SortOrder"] = "Ascending"

        items = await self._fetch_items(params)
        return [item for item in items if item.is_playable]

    async def query_path(self, path: str) -> List[ContentItem]:
        if not path:
            return []

        # The item API has no path filter; match the folder prefix client-side.
        prefix = path.rstrip("/") + "/"
        items = await self._fetch_items({
            "IncludeItemTypes": "Movie,Video",
            "MediaTypes": "Video",
        })
        return [
            item for item in items
            if item.item_type in POOL_ITEM_TYPES
            and item.path
            and item.path.startswith(prefix)
            and item.has_duration
        ]

    def _filter_params(self, content_filter: ContentFilter) -> Dict[str, str]:
        """Translate a ContentFilter into item API query parameters."""
        kind = content_filter.kind
        params: Dict[str, str] = {"IncludeItemTypes": "Movie,Episode"}

        if kind == FilterKind.GENRE:
            params["Genres"] = "|".join(content_filter.genres)
        elif kind == FilterKind.TAG:
            params["Tags"] = "|".join(content_filter.tags)
        elif kind == FilterKind.YEAR_RANGE:
            params["IncludeItemTypes"] = "Movie"
            params["Years"] = ",".join(
                str(year)
                for year in range(content_filter.year_from, content_filter.year_to + 1)
            )
        elif kind == FilterKind.SERIES:
            params["IncludeItemTypes"] = "Episode"
            params["ParentId"] = content_filter.series_id or ""

        return params

    async def _fetch_items(self, params: Dict[str, str]) -> List[ContentItem]:
        """Fetch all pages of an item query."""
        items: List[ContentItem] = []
        start_index = 0

        while True:
            page_params = {
                "Recursive": "true",
                "IsVirtualItem": "false",
                "Fields": ITEM_FIELDS,
                "EnableTotalRecordCount": "true",
                "StartIndex": str(start_index),
                "Limit": str(PAGE_SIZE),
                **params,
            }

            try:
                response = await self._client.get(
                    self.items_url, params=page_params, headers=self.headers
                )
            except httpx.HTTPError as e:
                raise CatalogError(f"Jellyfin request failed: {e}") from e

            if response.status_code != 200:
                raise CatalogError(
                    f"Jellyfin item query failed: HTTP {response.status_code}"
                )

            data = response.json()
            page = data.get("Items", [])
            for item_data in page:
                item = self._parse_item(item_data)
                if item:
                    items.append(item)

            start_index += len(page)
            total = data.get("TotalRecordCount", start_index)
            if not page or start_index >= total:
                break

        logger.debug(f"Jellyfin query returned {len(items)} items")
        return items

    def _parse_item(self, item_data: Dict[str, Any]) -> Optional[ContentItem]:
        """Parse a Jellyfin item into a ContentItem."""
        item_type = item_data.get("Type", "")
        if item_type == "Movie":
            kind = ItemType.MOVIE
        elif item_type == "Episode":
            kind = ItemType.EPISODE
        elif item_type == "Video":
            kind = ItemType.VIDEO
        else:
            return None

        duration = None
        runtime_ticks = item_data.get("RunTimeTicks")
        if runtime_ticks:
            # Jellyfin ticks are 100ns
            duration = timedelta(microseconds=runtime_ticks // 10)

        return ContentItem(
            id=item_data.get("Id", ""),
            name=item_data.get("Name", "Untitled"),
            duration=duration,
            path=item_data.get("Path"),
            item_type=kind,
            overview=item_data.get("Overview"),
            series_id=item_data.get("SeriesId"),
            series_name=item_data.get("SeriesName"),
            season_number=item_data.get("ParentIndexNumber"),
            episode_number=item_data.get("IndexNumber"),
            genres=tuple(item_data.get("Genres") or ()),
            tags=tuple(item_data.get("Tags") or ()),
            year=item_data.get("ProductionYear"),
        )

