"""
VirtualTV Test Configuration

Shared fixtures and configuration for all tests.
"""

import os
import random
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, List
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.fixtures.factories import (
    ChannelPolicyFactory,
    CommercialFactory,
    ContentItemFactory,
)
from virtualtv.config import ChannelPolicy, VirtualTVConfig
from virtualtv.library import ContentItem, InMemoryCatalog
from virtualtv.main import create_app
from virtualtv.service import VirtualChannelService

COMMERCIAL_PATH = "/media/commercials"


# ============ Clock and Randomness ============


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed wall-clock instant."""
    return datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible shuffles."""
    return random.Random(42)


# ============ Catalog Fixtures ============


@pytest.fixture
def movies() -> List[ContentItem]:
    """Ten 90-minute comedy movies from the 1990s."""
    return ContentItemFactory.create_batch(
        10, minutes=90, genres=("Comedy",), year=1995,
    )


@pytest.fixture
def commercials() -> List[ContentItem]:
    """Five 30-second commercials."""
    return CommercialFactory.create_batch(5, folder=COMMERCIAL_PATH)


@pytest.fixture
def catalog(movies: List[ContentItem], commercials: List[ContentItem]) -> InMemoryCatalog:
    """In-memory catalog with movies and a commercial pool."""
    return InMemoryCatalog(movies + commercials)


@pytest.fixture
def comedy_channel() -> ChannelPolicy:
    """Genre channel matching the movie fixtures."""
    return ChannelPolicyFactory.create(
        number=1001, type="genre", content_filters=["Comedy"],
    )


# ============ Service Fixtures ============


@pytest.fixture
def test_config(comedy_channel: ChannelPolicy) -> VirtualTVConfig:
    """Configuration with one channel and auto channels off."""
    return VirtualTVConfig(
        commercials={"folder_path": COMMERCIAL_PATH},
        auto_channels={"enabled": False},
        playout={"epg_days_ahead": 1},
        channels=[comedy_channel],
    )


@pytest.fixture
def service(
    test_config: VirtualTVConfig,
    catalog: InMemoryCatalog,
    rng: random.Random,
    fixed_now: datetime,
) -> VirtualChannelService:
    """Channel service with a fixed clock."""
    return VirtualChannelService(test_config, catalog, rng=rng, clock=lambda: fixed_now)


# ============ FastAPI Test Client Fixtures ============


@pytest.fixture
def app(service: VirtualChannelService) -> FastAPI:
    """Create a test FastAPI application around the test service."""
    return create_app(service=service)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a synchronous test client (application lifespan not run)."""
    return TestClient(app)


# ============ Temporary File Fixtures ============


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_library_file(temp_dir: Path) -> Path:
    """Create a temporary YAML library file."""
    library_file = temp_dir / "library.yaml"
    library_file.write_text("""
items:
  - id: "m1"
    name: "Heat"
    duration: 10200
    path: "/media/movies/heat.mkv"
    item_type: movie
    genres: ["Action", "Crime"]
    year: 1995
  - id: "e1"
    name: "Pilot"
    duration: 1320
    path: "/media/tv/show/s01e01.mkv"
    item_type: episode
    series_id: "show1"
    series_name: "The Show"
    season_number: 1
    episode_number: 1
  - id: "c1"
    name: "Soda Ad"
    duration: 30
    path: "/media/commercials/soda.mp4"
    item_type: video
""")
    return library_file


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """Create a temporary config file."""
    config_file = temp_dir / "config.yaml"
    config_file.write_text("""
server:
  host: "127.0.0.1"
  port: 8411

logging:
  level: "DEBUG"
  log_to_file: false

playout:
  epg_days_ahead: 2

channels:
  - id: "classic_comedy"
    name: "Classic Comedy"
    number: 1001
    type: "Genre"
    content_filters: ["Comedy"]
    shuffle: true
  - id: "the_show"
    name: "The Show"
    number: 1002
    type: "series"
    content_filters: ["show1"]
""")
    return config_file


# ============ Environment Fixtures ============


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables for each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("VIRTUALTV_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env_vars():
    """Set up mock environment variables."""
    env_vars = {
        "VIRTUALTV_PORT": "8411",
        "VIRTUALTV_LOG_LEVEL": "DEBUG",
        "VIRTUALTV_COMMERCIAL_PATH": "/srv/ads",
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


# ============ Markers ============


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "network: Network access required")
