"""
Shared fixtures for catalog service tests.
Fixture payloads are captured TMDB /movie/{id} responses.
"""

# Set environment to test mode FIRST, before any imports
import os

os.environ["ENVIRONMENT"] = "test"

from pathlib import Path

import pytest

from adapters.config import ScheduleSettings
from utils.pytest_utils import load_json_fixture

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(filename: str) -> dict:
    return load_json_fixture(FIXTURES_DIR, filename)


@pytest.fixture
def mock_tmdb_token():
    """Mock TMDB API read token."""
    return "test_tmdb_token_12345"


@pytest.fixture
def matrix_payload():
    """TMDB details payload for The Matrix (603)."""
    return load_fixture("movie_603.json")


@pytest.fixture
def catalog_settings():
    return ScheduleSettings(
        catalog_base_url="https://tmdb.test/3",
        catalog_image_base_url="https://images.tmdb.test/t/p/w500",
        catalog_timeout_seconds=2.0,
    )
