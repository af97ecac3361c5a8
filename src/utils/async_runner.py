"""
Async Runner Utility - Run wrapper coroutines from synchronous Firebase handlers.

Firebase HTTP functions are plain WSGI callables, so handlers need a bridge into
the async wrappers. A worker may already own a running loop (gunicorn forks,
the emulator), so nest_asyncio is applied once to let run_until_complete nest.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import nest_asyncio

from utils.get_logger import get_logger

logger = get_logger(__name__)

_nest_asyncio_applied = False


def _ensure_nest_asyncio():
    """Apply the nest_asyncio patch exactly once."""
    global _nest_asyncio_applied
    if not _nest_asyncio_applied:
        try:
            nest_asyncio.apply()
            _nest_asyncio_applied = True
            logger.debug("nest_asyncio patch applied")
        except RuntimeError as e:
            if "already been applied" in str(e).lower():
                _nest_asyncio_applied = True
            else:
                logger.warning(f"Failed to apply nest_asyncio: {e}")


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """
    Run a coroutine to completion from synchronous code.

    Uses the running loop when there is one (nested via nest_asyncio),
    otherwise asyncio.run() creates a fresh loop.

    Args:
        coro: The coroutine to run

    Returns:
        The result of the coroutine

    Raises:
        Whatever the coroutine raises.
    """
    _ensure_nest_asyncio()

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None and not loop.is_closed():
        return loop.run_until_complete(coro)

    return asyncio.run(coro)
