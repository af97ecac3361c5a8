"""
Catalog Core Service - TMDB movie lookups by identifier.
Single attempt per call; retry policy belongs to the caller.
"""

from __future__ import annotations

import aiohttp
from pydantic import ValidationError

from adapters.config import ScheduleSettings
from api.catalog.auth import bearer_headers
from api.catalog.models import CatalogNotFoundError, CatalogRecord, CatalogUnavailableError
from utils.base_api_client import BaseAPIClient
from utils.get_logger import get_logger

logger = get_logger(__name__)


class CatalogService(BaseAPIClient):
    """
    TMDB client for movie details.

    fetch_by_id maps a 404 to CatalogNotFoundError and every other failure to
    CatalogUnavailableError, so callers only ever see catalog errors.
    """

    # TMDB allows roughly 40 requests per second; stay under it
    _rate_limit_period = 1

    def __init__(self, settings: ScheduleSettings | None = None):
        settings = settings or ScheduleSettings.from_env()
        self.base_url = settings.catalog_base_url
        self.image_base_url = settings.catalog_image_base_url
        self.timeout = settings.catalog_timeout_seconds
        self._rate_limit_max = settings.catalog_rate_limit

    async def fetch_by_id(self, catalog_id: int, credential: str) -> CatalogRecord:
        """Fetch movie details for a TMDB id.

        Args:
            catalog_id: TMDB movie id
            credential: TMDB API read token

        Returns:
            CatalogRecord with the movie metadata

        Raises:
            CatalogNotFoundError: If TMDB has no movie with this id
            CatalogUnavailableError: On timeout, non-200 status or malformed payload
        """
        url = f"{self.base_url}/movie/{catalog_id}"

        try:
            data, status = await self._core_async_request(
                url=url,
                headers=bearer_headers(credential),
                timeout=self.timeout,
                rate_limit_max=self._rate_limit_max,
                rate_limit_period=self._rate_limit_period,
            )
        except (TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.error(f"Error fetching movie {catalog_id} from TMDb: {type(e).__name__}: {e}")
            raise CatalogUnavailableError(catalog_id, reason=type(e).__name__) from e

        if status == 404:
            raise CatalogNotFoundError(catalog_id)
        if status != 200:
            raise CatalogUnavailableError(catalog_id, reason=f"TMDb API error: {status}")

        if not isinstance(data, dict):
            logger.error(f"Unexpected TMDb payload for movie {catalog_id}: {type(data).__name__}")
            raise CatalogUnavailableError(catalog_id, reason="malformed payload")

        try:
            return CatalogRecord.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed TMDb payload for movie {catalog_id}: {e}")
            raise CatalogUnavailableError(catalog_id, reason="malformed payload") from e

    def image_url(self, path: str | None) -> str | None:
        """Build an absolute image URL from a relative TMDB path."""
        if not path:
            return None
        if path.startswith("http"):
            return path
        return f"{self.image_base_url}/{path.lstrip('/')}"
