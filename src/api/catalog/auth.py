"""
Catalog Auth Service - Loads and caches the TMDB API key for this instance.

The key is read from Secret Manager once per process and held in memory until
the instance is recycled. It is never written anywhere and never logged.
"""

import json
import os
import threading
from collections.abc import Callable

from firebase_functions.params import SecretParam

from api.catalog.models import CredentialUnavailableError
from utils.get_logger import get_logger

logger = get_logger(__name__)

# Secret name, and the field holding the key when the secret is a JSON object
SECRET_NAME = "TMDB_API_KEY"
SECRET_KEY_FIELD = "TMDB_API_KEY"

TMDB_API_KEY = SecretParam(SECRET_NAME)


def load_secret_value() -> str | None:
    """Read the raw secret from SecretParam, falling back to the environment."""
    try:
        value = TMDB_API_KEY.value
        if value:
            return value
    except Exception as e:
        logger.warning(f"SecretParam access failed: {e}, falling back to environment variable")

    value = os.getenv(SECRET_NAME)
    if value:
        logger.info("Loaded TMDB API key via env var")
    return value


def parse_secret_value(raw: str | None) -> str:
    """
    Resolve the API key from a raw secret payload.

    Accepts a bare key or a JSON object carrying it under SECRET_KEY_FIELD.

    Raises:
        CredentialUnavailableError: If the payload is empty or the object lacks the key
    """
    if raw is None or not raw.strip():
        raise CredentialUnavailableError("Catalog API key secret is empty")

    try:
        payload = json.loads(raw)
    except ValueError:
        return raw.strip()

    if not isinstance(payload, dict):
        return raw.strip()

    api_key = payload.get(SECRET_KEY_FIELD)
    if not isinstance(api_key, str) or not api_key.strip():
        raise CredentialUnavailableError(
            f"Catalog API key secret has no '{SECRET_KEY_FIELD}' field"
        )
    return api_key.strip()


class CatalogAuth:
    """
    Process-wide cache for the catalog credential.

    The first get_credential() call fetches from the secret store; later calls
    return the cached value. A lock serializes the first population so
    concurrent callers trigger a single fetch. Failures are not cached.
    """

    def __init__(self, secret_loader: Callable[[], str | None] | None = None):
        self._secret_loader = secret_loader or load_secret_value
        self._api_key: str | None = None
        self._lock = threading.Lock()

    def get_credential(self) -> str:
        """
        Return the catalog API key, loading it on first use.

        Raises:
            CredentialUnavailableError: If the secret store is unreachable or the secret is unusable
        """
        if self._api_key is not None:
            logger.debug("Using cached TMDB API key")
            return self._api_key

        with self._lock:
            if self._api_key is None:
                logger.info("Fetching TMDB API key from secret store")
                try:
                    raw = self._secret_loader()
                except CredentialUnavailableError:
                    raise
                except Exception as e:
                    logger.error(f"Failed to retrieve TMDB API key: {e}")
                    raise CredentialUnavailableError() from e

                self._api_key = parse_secret_value(raw)
                logger.info("TMDB API key cached")

        return self._api_key


def bearer_headers(credential: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {credential}",
        "Content-Type": "application/json",
    }


# Singleton instance for use across the application
catalog_auth = CatalogAuth()
