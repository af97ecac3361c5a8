"""
Tests for environment-driven schedule settings.
"""

import pytest

from adapters.config import ScheduleSettings

pytestmark = pytest.mark.unit

SETTINGS_VARS = (
    "CATALOG_BASE_URL",
    "CATALOG_IMAGE_BASE_URL",
    "CATALOG_TIMEOUT_SECONDS",
    "CATALOG_RATE_LIMIT",
    "ENRICHMENT_BATCH_SIZE",
    "SCHEDULE_KEY_PREFIX",
    "CORS_ALLOW_ORIGIN",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in SETTINGS_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = ScheduleSettings.from_env()

    assert settings == ScheduleSettings()
    assert settings.catalog_base_url == "https://api.themoviedb.org/3"
    assert settings.key_prefix == "movieclub"


def test_overrides(clean_env):
    clean_env.setenv("CATALOG_BASE_URL", "https://tmdb.test/3/")
    clean_env.setenv("CATALOG_TIMEOUT_SECONDS", "2.5")
    clean_env.setenv("CATALOG_RATE_LIMIT", "5")
    clean_env.setenv("SCHEDULE_KEY_PREFIX", "club-staging")
    clean_env.setenv("CORS_ALLOW_ORIGIN", "https://club.test")

    settings = ScheduleSettings.from_env()

    assert settings.catalog_base_url == "https://tmdb.test/3"
    assert settings.catalog_timeout_seconds == 2.5
    assert settings.catalog_rate_limit == 5
    assert settings.key_prefix == "club-staging"
    assert settings.cors_allow_origin == "https://club.test"


def test_batch_size_at_least_one(clean_env):
    clean_env.setenv("ENRICHMENT_BATCH_SIZE", "0")
    assert ScheduleSettings.from_env().enrichment_batch_size == 1
