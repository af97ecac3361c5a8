"""
Catalog Services - TMDB credential cache and movie lookups.
"""

from api.catalog.auth import CatalogAuth, catalog_auth
from api.catalog.core import CatalogService
from api.catalog.models import (
    CatalogError,
    CatalogGenre,
    CatalogNotFoundError,
    CatalogRecord,
    CatalogUnavailableError,
    CredentialUnavailableError,
)

__all__ = [
    # Auth
    "CatalogAuth",
    "catalog_auth",
    # Core
    "CatalogService",
    # Models
    "CatalogGenre",
    "CatalogRecord",
    # Errors
    "CatalogError",
    "CatalogNotFoundError",
    "CatalogUnavailableError",
    "CredentialUnavailableError",
]
