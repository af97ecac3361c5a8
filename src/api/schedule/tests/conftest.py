"""
Shared fixtures for schedule service tests.

The catalog lookup is an AsyncMock over CatalogService.fetch_by_id and the
store is InMemoryRedis, so no network or Redis server is needed.
"""

# Set environment to test mode FIRST, before any imports
import os

os.environ["ENVIRONMENT"] = "test"

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from adapters.config import ScheduleSettings
from adapters.schedule_repository import ScheduleRepository
from api.catalog.auth import CatalogAuth
from api.catalog.core import CatalogService
from api.catalog.models import CatalogNotFoundError, CatalogRecord
from api.schedule.wrappers import ScheduleWrapper
from utils.pytest_utils import InMemoryRedis, load_json_fixture

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_record(filename: str) -> CatalogRecord:
    return CatalogRecord.model_validate(load_json_fixture(FIXTURES_DIR, filename))


@pytest.fixture
def mock_tmdb_token():
    return "test_tmdb_token_12345"


@pytest.fixture
def schedule_settings():
    return ScheduleSettings(
        catalog_base_url="https://tmdb.test/3",
        catalog_image_base_url="https://images.tmdb.test/t/p/w500",
        catalog_timeout_seconds=2.0,
        enrichment_batch_size=2,
        key_prefix="test",
        cors_allow_origin="https://club.test",
    )


@pytest.fixture
def catalog_records():
    """Catalog records by TMDB id, as the mocked catalog knows them."""
    return {
        603: load_record("movie_603.json"),
        27205: load_record("movie_27205.json"),
    }


@pytest.fixture
def secret_loader(mock_tmdb_token):
    return MagicMock(return_value=mock_tmdb_token)


@pytest.fixture
def catalog_auth(secret_loader):
    return CatalogAuth(secret_loader=secret_loader)


@pytest.fixture
def catalog_service(schedule_settings, catalog_records):
    """CatalogService whose fetch_by_id answers from catalog_records."""
    service = CatalogService(schedule_settings)

    async def _fetch(catalog_id: int, credential: str) -> CatalogRecord:
        if catalog_id not in catalog_records:
            raise CatalogNotFoundError(catalog_id)
        return catalog_records[catalog_id]

    service.fetch_by_id = AsyncMock(side_effect=_fetch)
    return service


@pytest.fixture
def redis():
    return InMemoryRedis()


@pytest.fixture
def repository(redis, schedule_settings):
    return ScheduleRepository(redis=redis, key_prefix=schedule_settings.key_prefix)


@pytest.fixture
def wrapper(catalog_auth, catalog_service, repository, schedule_settings):
    return ScheduleWrapper(
        auth=catalog_auth,
        catalog=catalog_service,
        repository=repository,
        settings=schedule_settings,
    )
