"""
Base API Client - Shared single-attempt request handling for outbound APIs.

Services inherit from BaseAPIClient and call _core_async_request. There is no
retry loop here: a failed call is reported to the caller, which decides whether
to degrade or fail. Rate limiting and a per-loop concurrency cap keep fan-out
(e.g. enriching a whole listing at once) inside the upstream's limits.
"""

import asyncio
import os
from typing import Any

import aiohttp

from utils.get_logger import get_logger
from utils.rate_limiter import get_rate_limiter

logger = get_logger(__name__)

# Unit tests mock the HTTP layer; skip rate limiting there to avoid delays.
_SKIP_RATE_LIMITING = os.getenv("ENVIRONMENT", "").lower() == "test"


class _NoOpLimiter:
    async def __aenter__(self) -> "_NoOpLimiter":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None


class BaseAPIClient:
    """
    Base class for API clients with shared request handling.
    Provides rate limiting and a concurrency cap; callers own retry policy.
    """

    # Key: (rate_limit_max, rate_limit_period, loop_id)
    _concurrency_semaphores: dict[tuple[int, float, int], asyncio.Semaphore] = {}

    @classmethod
    def _get_concurrency_semaphore(
        cls, rate_limit_max: int, rate_limit_period: float
    ) -> asyncio.Semaphore:
        """
        Get or create the semaphore limiting simultaneous in-flight requests.

        Semaphores are loop-bound, so one is kept per (config, loop) pair.
        """
        loop = asyncio.get_running_loop()
        cache_key = (rate_limit_max, rate_limit_period, id(loop))
        if cache_key not in cls._concurrency_semaphores:
            for key in [k for k in cls._concurrency_semaphores if k[:2] == cache_key[:2]]:
                del cls._concurrency_semaphores[key]
            cls._concurrency_semaphores[cache_key] = asyncio.Semaphore(rate_limit_max)
        return cls._concurrency_semaphores[cache_key]

    def _get_limiters(self, rate_limit_max: int, rate_limit_period: float) -> tuple[Any, Any]:
        if _SKIP_RATE_LIMITING:
            return _NoOpLimiter(), _NoOpLimiter()
        return (
            get_rate_limiter(rate_limit_max, rate_limit_period),
            self._get_concurrency_semaphore(rate_limit_max, rate_limit_period),
        )

    async def _core_async_request(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
        timeout: float = 10,
        rate_limit_max: int = 10,
        rate_limit_period: float = 1.0,
    ) -> tuple[Any, int]:
        """
        Single async HTTP GET returning the parsed JSON body and status code.

        Args:
            url: Full URL to request
            params: Optional query parameters
            headers: Optional HTTP headers
            timeout: Total request timeout in seconds (default: 10)
            rate_limit_max: Maximum requests per period (default: 10)
            rate_limit_period: Time period in seconds (default: 1.0)

        Returns:
            Tuple (json_body, status). json_body is None for any non-200 status.

        Raises:
            TimeoutError: If the request exceeds the timeout
            aiohttp.ClientError: On connection failures or a non-JSON content type
            ValueError: If a JSON-typed 200 body does not decode
        """
        rate_limiter, concurrency_semaphore = self._get_limiters(
            rate_limit_max, rate_limit_period
        )
        request_timeout = aiohttp.ClientTimeout(total=timeout)

        async with concurrency_semaphore, rate_limiter:  # noqa: SIM117
            async with (
                aiohttp.ClientSession(timeout=request_timeout) as session,
                session.get(url, params=params, headers=headers) as response,
            ):
                status = response.status
                if status != 200:
                    if status == 404:
                        logger.debug(f"API returned status 404 for {url} (resource not found)")
                    else:
                        logger.warning(f"API returned status {status} for {url}")
                    # Consume the body so the connection is released cleanly
                    await response.read()
                    return None, status

                return await response.json(), status
