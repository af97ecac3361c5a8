"""
Catalog Models - Pydantic models for the TMDB movie details payload
and the errors raised while talking to the catalog.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from contracts.models import ErrorCategory, ServiceError
from utils.pydantic_tools import BaseModelWithMethods


class CatalogGenre(BaseModelWithMethods):
    """Model for a TMDB genre."""

    id: int
    name: str


class CatalogRecord(BaseModelWithMethods):
    """Model for the subset of TMDB /movie/{id} used by the schedule."""

    id: int
    title: str
    original_title: str | None = None
    overview: str | None = ""

    # Relative paths, e.g. "/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg"
    poster_path: str | None = None
    backdrop_path: str | None = None

    release_date: str | None = None
    runtime: int | None = None
    genres: list[CatalogGenre] = Field(default_factory=list)

    vote_average: float | None = None
    vote_count: int | None = None

    @field_validator("overview", mode="before")
    @classmethod
    def overview_null_to_empty(cls, v):
        # TMDB sends null for movies with no synopsis
        return "" if v is None else v

    @field_validator("genres", mode="before")
    @classmethod
    def genres_null_to_empty(cls, v):
        return [] if v is None else v


class CatalogError(ServiceError):
    """Base for catalog failures."""


class CredentialUnavailableError(CatalogError):
    """Raised when the catalog API key cannot be loaded from the secret store."""

    status_code = 500
    category = ErrorCategory.INTERNAL

    def __init__(self, message: str = "Failed to retrieve catalog API key from secret store"):
        super().__init__(message)


class CatalogNotFoundError(CatalogError):
    """Raised when the catalog reports that an identifier does not exist."""

    status_code = 404
    category = ErrorCategory.NOT_FOUND

    def __init__(self, catalog_id: int):
        super().__init__(f"Movie with TMDb ID {catalog_id} not found")
        self.catalog_id = catalog_id


class CatalogUnavailableError(CatalogError):
    """Raised for any other catalog failure: timeout, 5xx, malformed payload."""

    status_code = 500
    category = ErrorCategory.INTERNAL

    def __init__(self, catalog_id: int, reason: str = ""):
        message = "Failed to fetch movie from TMDb"
        super().__init__(message)
        self.catalog_id = catalog_id
        self.reason = reason
