"""
Rate Limiter Utility - one AsyncLimiter per API configuration per event loop.

AsyncLimiter binds to the loop it is first used on. Handlers may run each
request on a fresh loop (asyncio.run), so limiters are keyed by loop id and a
limiter is never shared across loops.

Usage:
    from utils.rate_limiter import get_rate_limiter

    limiter = get_rate_limiter(max_rate=35, time_period=1)
    async with limiter:
        ...
"""

from __future__ import annotations

import asyncio
import threading

from aiolimiter import AsyncLimiter

from utils.get_logger import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()

# Key: (max_rate, time_period, loop_id)
_limiters: dict[tuple[int, float, int], AsyncLimiter] = {}


def get_rate_limiter(max_rate: int, time_period: float = 1.0) -> AsyncLimiter:
    """
    Get or create the limiter for this API configuration on the running loop.

    Args:
        max_rate: Maximum number of requests allowed per period
        time_period: Period length in seconds (default: 1.0)

    Returns:
        AsyncLimiter bound to the current event loop

    Raises:
        RuntimeError: If called outside a running event loop
    """
    loop = asyncio.get_running_loop()
    cache_key = (max_rate, time_period, id(loop))

    if cache_key not in _limiters:
        with _lock:
            if cache_key not in _limiters:
                # Keep one limiter per configuration: the one for the newest loop
                stale = [key for key in _limiters if key[:2] == (max_rate, time_period)]
                for key in stale:
                    _limiters.pop(key, None)
                _limiters[cache_key] = AsyncLimiter(max_rate, time_period)
                logger.debug(
                    f"Created rate limiter for loop {id(loop)}: "
                    f"{max_rate} requests per {time_period}s"
                )

    return _limiters[cache_key]
