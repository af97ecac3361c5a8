"""
Schedule Async Wrappers - business logic behind the /movies endpoints.
Handlers call these; they raise ServiceError subclasses for the handler to map.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from adapters.config import ScheduleSettings
from adapters.schedule_repository import ScheduleRepository
from api.catalog.auth import CatalogAuth, catalog_auth
from api.catalog.core import CatalogService
from api.catalog.models import CatalogError, CatalogRecord
from api.schedule.models import (
    AddMovieRequest,
    AddMovieResponse,
    GetScheduleResponse,
    ScheduledMovie,
    ScheduleEntry,
)
from contracts.models import MovieStatus
from utils.get_logger import get_logger

logger = get_logger(__name__)


class ScheduleWrapper:
    def __init__(
        self,
        auth: CatalogAuth | None = None,
        catalog: CatalogService | None = None,
        repository: ScheduleRepository | None = None,
        settings: ScheduleSettings | None = None,
    ):
        """Collaborators default to the process-wide instances."""
        self.settings = settings or ScheduleSettings.from_env()
        self.auth = auth or catalog_auth
        self.catalog = catalog or CatalogService(self.settings)
        self.repository = repository or ScheduleRepository(key_prefix=self.settings.key_prefix)

    async def add_movie(self, body: str | bytes | None, added_by: str | None = None) -> AddMovieResponse:
        """
        Validate a POST /movies body, resolve it in TMDB and persist the entry.

        Order: validation, credential, catalog lookup, conditional insert. Each
        step runs only if the previous one succeeded, so failures write nothing.

        Raises:
            ScheduleValidationError: Malformed body (400)
            CatalogNotFoundError: Unknown TMDB id (404)
            MovieAlreadyExistsError: Already scheduled (409)
            CredentialUnavailableError, CatalogUnavailableError, StoreUnavailableError: (500)
        """
        request = AddMovieRequest.from_body(body)

        credential = self.auth.get_credential()
        record = await self.catalog.fetch_by_id(request.catalog_id, credential)

        entry = ScheduleEntry.from_catalog(request, record, added_by=added_by)
        await self.repository.insert_if_absent(entry)

        logger.info(f"Movie {entry.catalog_id} added successfully by {added_by or 'anonymous'}")
        return AddMovieResponse(movie=entry)

    async def get_schedule(self) -> GetScheduleResponse:
        """
        List scheduled movies by discussion date, refreshed from TMDB.

        A failed refresh for one movie falls back to its stored fields; the
        credential and the store query are required for the whole listing.

        Raises:
            CredentialUnavailableError, StoreUnavailableError: (500)
        """
        credential = self.auth.get_credential()

        entries = await self.repository.query_by_status(MovieStatus.SCHEDULED)
        logger.info(f"Retrieved {len(entries)} movies from Redis")

        tasks = [self._enrich(entry, credential) for entry in entries]
        movies: list[ScheduledMovie] = await self._batch_process(
            tasks, batch_size=self.settings.enrichment_batch_size
        )

        return GetScheduleResponse(movies=movies, count=len(movies))

    @staticmethod
    async def _batch_process(tasks: list[Coroutine[Any, Any, Any]], batch_size: int = 10) -> list:
        """Run coroutines concurrently in fixed-size batches.

        Returns:
            Results in the same order as tasks
        """
        results: list = []
        for i in range(0, len(tasks), batch_size):
            batch = tasks[i : i + batch_size]
            results.extend(await asyncio.gather(*batch))
        return results

    async def _enrich(self, entry: ScheduleEntry, credential: str) -> ScheduledMovie:
        try:
            record = await self.catalog.fetch_by_id(entry.catalog_id, credential)
        except CatalogError as e:
            logger.warning(
                f"Failed to enrich movie {entry.catalog_id} from TMDb, using stored data: {e}"
            )
            return self._from_stored(entry)
        return self._from_catalog(entry, record)

    def _from_catalog(self, entry: ScheduleEntry, record: CatalogRecord) -> ScheduledMovie:
        return ScheduledMovie(
            catalog_id=entry.catalog_id,
            title=record.title,
            synopsis=record.overview,
            poster_path=record.poster_path or None,
            poster_url=self.catalog.image_url(record.poster_path),
            backdrop_url=self.catalog.image_url(record.backdrop_path),
            discussion_date=entry.discussion_date,
            status=entry.status,
            release_date=record.release_date or None,
            runtime_minutes=record.runtime,
            rating_average=record.vote_average,
            genres=record.genres,
            notes=entry.notes,
            enriched=True,
        )

    def _from_stored(self, entry: ScheduleEntry) -> ScheduledMovie:
        return ScheduledMovie(
            catalog_id=entry.catalog_id,
            title=entry.title,
            synopsis=entry.synopsis,
            poster_path=entry.poster_path,
            poster_url=self.catalog.image_url(entry.poster_path),
            backdrop_url=self.catalog.image_url(entry.backdrop_path),
            discussion_date=entry.discussion_date,
            status=entry.status,
            release_date=entry.release_date,
            runtime_minutes=entry.runtime_minutes,
            rating_average=entry.rating_average,
            genres=entry.genres or [],
            notes=entry.notes,
            enriched=False,
        )


# Global wrapper instance used by the handlers
schedule_wrapper = ScheduleWrapper()
