"""
Schedule Models - Pydantic models for schedule entries, API payloads and errors.
Wire format is camelCase (see CamelModel); Python attributes are snake_case.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, date, datetime
from typing import Any

from pydantic import Field, field_validator

from api.catalog.models import CatalogGenre, CatalogRecord
from contracts.models import SUBMITTABLE_STATUSES, ErrorCategory, MovieStatus, ServiceError
from utils.pydantic_tools import CamelModel

NOTES_MAX_LENGTH = 1000

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_discussion_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the format is wrong or the date does not exist
    """
    if not _DATE_PATTERN.match(value):
        raise ValueError("discussion_date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError("discussion_date is not a valid date") from e


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


# ============================================================================
# Errors
# ============================================================================


class ScheduleValidationError(ServiceError):
    """Client input was malformed. Raised before any external call."""

    status_code = 400
    category = ErrorCategory.VALIDATION


class MovieAlreadyExistsError(ServiceError):
    """A schedule entry with this catalog id already exists."""

    status_code = 409
    category = ErrorCategory.CONFLICT

    def __init__(self, catalog_id: int):
        super().__init__(f"Movie with TMDb ID {catalog_id} already exists in the schedule")
        self.catalog_id = catalog_id


class StoreUnavailableError(ServiceError):
    """The schedule store could not be read or written."""

    status_code = 500
    category = ErrorCategory.INTERNAL


class IdentityError(ServiceError):
    """The request carried no usable identity claim."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code
        if status_code == 401:
            self.category = ErrorCategory.UNAUTHORIZED
        elif status_code == 403:
            self.category = ErrorCategory.FORBIDDEN
        else:
            self.category = ErrorCategory.INTERNAL


# ============================================================================
# Stored entry
# ============================================================================


class ScheduleEntry(CamelModel):
    """One movie scheduled for club discussion, as persisted."""

    catalog_id: int = Field(gt=0)
    status: MovieStatus = MovieStatus.SCHEDULED
    discussion_date: str

    # Catalog metadata captured when the movie was added
    title: str
    original_title: str | None = None
    synopsis: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str | None = None
    runtime_minutes: int | None = None
    genres: list[CatalogGenre] | None = None
    rating_average: float | None = None
    rating_count: int | None = None

    # Club-specific data
    added_by: str | None = None
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)

    created_at: str
    updated_at: str

    @field_validator("discussion_date")
    @classmethod
    def validate_discussion_date(cls, value: str) -> str:
        parse_discussion_date(value)
        return value

    @classmethod
    def from_catalog(
        cls,
        request: AddMovieRequest,
        record: CatalogRecord,
        added_by: str | None = None,
    ) -> ScheduleEntry:
        """Build a new entry from a validated request and the resolved catalog record."""
        now = utc_timestamp()
        return cls(
            catalog_id=request.catalog_id,
            status=request.status or MovieStatus.SCHEDULED,
            discussion_date=request.discussion_date,
            title=record.title,
            original_title=record.original_title,
            synopsis=record.overview,
            poster_path=record.poster_path or None,
            backdrop_path=record.backdrop_path or None,
            release_date=record.release_date or None,
            runtime_minutes=record.runtime,
            genres=record.genres,
            rating_average=record.vote_average,
            rating_count=record.vote_count,
            notes=request.notes,
            added_by=added_by,
            created_at=now,
            updated_at=now,
        )


# ============================================================================
# Add movie request
# ============================================================================


class AddMovieRequest(CamelModel):
    """Validated POST /movies body."""

    catalog_id: int
    discussion_date: str
    status: MovieStatus | None = None
    notes: str | None = None

    @classmethod
    def from_body(cls, body: str | bytes | None) -> AddMovieRequest:
        """Parse and validate a raw request body.

        Raises:
            ScheduleValidationError: With a human-readable reason
        """
        if body is None or (isinstance(body, (str, bytes)) and not body.strip()):
            payload: Any = {}
        else:
            try:
                payload = json.loads(body)
            except ValueError as e:
                raise ScheduleValidationError("Request body must be valid JSON") from e

        if not isinstance(payload, dict):
            raise ScheduleValidationError("Request body must be a JSON object")

        return cls.from_payload(payload)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AddMovieRequest:
        catalog_id = _first_present(payload, "catalogId", "catalog_id")
        discussion_date = _first_present(payload, "discussionDate", "discussion_date")
        status = payload.get("status")
        notes = payload.get("notes")

        # bool is an int subclass; reject it explicitly
        if isinstance(catalog_id, bool) or not isinstance(catalog_id, (int, float)):
            raise ScheduleValidationError("catalogId is required and must be a number")
        if isinstance(catalog_id, float):
            if not catalog_id.is_integer():
                raise ScheduleValidationError("catalogId must be a whole number")
            catalog_id = int(catalog_id)
        if catalog_id <= 0:
            raise ScheduleValidationError("catalogId must be a positive number")

        if not isinstance(discussion_date, str) or not discussion_date:
            raise ScheduleValidationError("discussionDate is required and must be a string")
        try:
            parse_discussion_date(discussion_date)
        except ValueError as e:
            raise ScheduleValidationError(
                str(e).replace("discussion_date", "discussionDate")
            ) from e

        parsed_status: MovieStatus | None = None
        if status is not None:
            if status not in [s.value for s in SUBMITTABLE_STATUSES]:
                raise ScheduleValidationError("status must be either 'scheduled' or 'watched'")
            parsed_status = MovieStatus(status)

        if notes is not None:
            if not isinstance(notes, str):
                raise ScheduleValidationError("notes must be a string")
            if len(notes) > NOTES_MAX_LENGTH:
                raise ScheduleValidationError(
                    f"notes must be at most {NOTES_MAX_LENGTH} characters",
                    details={"length": len(notes)},
                )

        return cls(
            catalog_id=catalog_id,
            discussion_date=discussion_date,
            status=parsed_status,
            notes=notes,
        )


def _first_present(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


# ============================================================================
# Responses
# ============================================================================


class ScheduledMovie(CamelModel):
    """One row of the GET /movies listing."""

    catalog_id: int
    title: str
    synopsis: str = ""
    poster_path: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    discussion_date: str
    status: MovieStatus
    release_date: str | None = None
    runtime_minutes: int | None = None
    rating_average: float | None = None
    genres: list[CatalogGenre] = Field(default_factory=list)
    notes: str | None = None

    # True when the catalog fields come from a fresh lookup, False when stored
    enriched: bool = False


class GetScheduleResponse(CamelModel):
    movies: list[ScheduledMovie] = Field(default_factory=list)
    count: int = 0


class AddMovieResponse(CamelModel):
    success: bool = True
    movie: ScheduleEntry
    message: str = "Movie successfully added to schedule"
