"""
Configuration management for VirtualTV.

Handles loading, validation, and access to application configuration.
Configuration is loaded once at startup and passed explicitly to the
components that need it.
"""

import logging
import os
import re
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from virtualtv.library.base import ContentFilter, SortOrder

logger = logging.getLogger(__name__)

_DECADE_PATTERN = re.compile(r"^(\d{4})s$")
_RANGE_PATTERN = re.compile(r"^(\d{4})\s*-\s*(\d{4})$")
_YEAR_PATTERN = re.compile(r"^\d{4}$")
_SERIES_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
AUTO_CHANNEL_PREFIX = "auto_"


class ServerConfig(BaseModel):
    """Server configuration."""
    host: str = "0.0.0.0"
    port: int = 8097
    base_url: str = "http://localhost:8097"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: str = "logs/virtualtv.log"
    max_size_mb: int = 10
    backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_to_console: bool = True
    log_to_file: bool = True


class JellyfinConfig(BaseModel):
    """Jellyfin catalog configuration."""
    url: str = ""
    api_key: str = ""
    user_id: Optional[str] = None
    timeout: float = 30.0


class CatalogConfig(BaseModel):
    """Content catalog configuration."""
    backend: str = "memory"  # memory, jellyfin
    library_file: Optional[str] = None  # YAML item list for the memory backend
    jellyfin: JellyfinConfig = Field(default_factory=JellyfinConfig)


class CommercialsConfig(BaseModel):
    """Commercial pool configuration."""
    folder_path: str = ""  # empty disables commercials
    default_interval: int = 900  # 15 minutes


class PlayoutConfig(BaseModel):
    """Playout and guide configuration."""
    epg_days_ahead: int = 3
    guide_refresh_interval: int = 3600
    maintenance_interval: int = 300
    max_consecutive_skips: int = 50
    max_programs_per_channel: int = 5000
    history_retention_hours: int = 6


class AutoChannelsConfig(BaseModel):
    """Automatic channel generation configuration."""
    enabled: bool = True
    genre_channels: bool = True
    year_channels: bool = False
    base_channel_number: int = 1000
    min_genre_items: int = 5
    min_decade_items: int = 10
    update_interval: int = 3600


class ChannelType(str, Enum):
    """How a channel selects content."""

    CUSTOM = "custom"  # by tag, or everything when no tags are given
    GENRE = "genre"
    YEAR = "year"
    SERIES = "series"
    ALL = "all"


class ChannelPolicy(BaseModel):
    """Configuration for a virtual channel."""
    id: str = ""
    name: str = ""
    number: int = 0
    type: ChannelType = ChannelType.CUSTOM
    content_filters: list[str] = Field(default_factory=list)
    shuffle: bool = False
    respect_episode_order: bool = True
    commercial_interval_seconds: int = 900
    enable_pre_rolls: bool = True
    logo_path: str = ""
    enabled: bool = True

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def channel_id(self) -> str:
        """Channel identifier used in guides and state tracking."""
        return f"virtual_{self.number}"

    @property
    def commercial_interval(self) -> timedelta:
        return timedelta(seconds=self.commercial_interval_seconds)

    @property
    def is_auto_generated(self) -> bool:
        return self.id.startswith(AUTO_CHANNEL_PREFIX)

    def selection_filter(self) -> ContentFilter:
        """
        Build the catalog filter for this channel.

        Invalid filter input (a non-numeric year, an unusable series id)
        yields a filter that matches nothing.
        """
        filters = [f.strip() for f in self.content_filters if f and f.strip()]

        if self.type == ChannelType.GENRE:
            return ContentFilter.by_genres(filters) if filters else ContentFilter.nothing()

        if self.type == ChannelType.YEAR:
            if not filters:
                return ContentFilter.nothing()
            return _parse_year_filter(filters[0])

        if self.type == ChannelType.SERIES:
            if not filters or not _SERIES_ID_PATTERN.match(filters[0]):
                return ContentFilter.nothing()
            return ContentFilter.by_series(filters[0])

        if self.type == ChannelType.CUSTOM and filters:
            return ContentFilter.by_tags(filters)

        return ContentFilter.all()

    def selection_sort(self) -> Optional[SortOrder]:
        """Natural episode order applies to series channels only."""
        if self.type == ChannelType.SERIES and self.respect_episode_order:
            return SortOrder.NATURAL
        return None


def _parse_year_filter(value: str) -> ContentFilter:
    """Parse "1994", "1990s" or "1990-1999" into a year-range filter."""
    if _YEAR_PATTERN.match(value):
        year = int(value)
        return ContentFilter.by_years(year, year)

    match = _DECADE_PATTERN.match(value)
    if match:
        decade = int(match.group(1))
        return ContentFilter.by_years(decade, decade + 9)

    match = _RANGE_PATTERN.match(value)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start <= end:
            return ContentFilter.by_years(start, end)

    logger.warning(f"Unparseable year filter: {value!r}")
    return ContentFilter.nothing()


class VirtualTVConfig(BaseModel):
    """Main VirtualTV configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    commercials: CommercialsConfig = Field(default_factory=CommercialsConfig)
    playout: PlayoutConfig = Field(default_factory=PlayoutConfig)
    auto_channels: AutoChannelsConfig = Field(default_factory=AutoChannelsConfig)
    channels: list[ChannelPolicy] = Field(default_factory=list)

    @model_validator(mode="after")
    def _apply_commercial_interval_default(self) -> "VirtualTVConfig":
        """Channels without their own break interval use commercials.default_interval."""
        default = self.commercials.default_interval
        self.channels = [
            channel if "commercial_interval_seconds" in channel.model_fields_set
            else channel.model_copy(update={"commercial_interval_seconds": default})
            for channel in self.channels
        ]
        return self


def load_config(config_path: Optional[str] = None) -> VirtualTVConfig:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. Defaults to config.yaml in the
            current directory or project root.

    Returns:
        Loaded and validated configuration.
    """
    if config_path is None:
        possible_paths = [
            Path("config.yaml"),
            Path(__file__).parent.parent / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    env_overrides = _get_env_overrides()
    _deep_merge(config_data, env_overrides)

    return VirtualTVConfig(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    # Map of environment variables to config paths
    env_map = {
        "VIRTUALTV_HOST": ("server", "host"),
        "VIRTUALTV_PORT": ("server", "port"),
        "VIRTUALTV_BASE_URL": ("server", "base_url"),
        "VIRTUALTV_LOG_LEVEL": ("logging", "level"),
        "VIRTUALTV_CATALOG_BACKEND": ("catalog", "backend"),
        "VIRTUALTV_LIBRARY_FILE": ("catalog", "library_file"),
        "VIRTUALTV_JELLYFIN_URL": ("catalog", "jellyfin", "url"),
        "VIRTUALTV_JELLYFIN_API_KEY": ("catalog", "jellyfin", "api_key"),
        "VIRTUALTV_COMMERCIAL_PATH": ("commercials", "folder_path"),
    }

    for env_var, path in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(overrides, path, _parse_env_value(value))

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    # Boolean
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    # Integer
    try:
        return int(value)
    except ValueError:
        pass

    # Float
    try:
        return float(value)
    except ValueError:
        pass

    return value


def _set_nested(d: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested dictionary value from a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
