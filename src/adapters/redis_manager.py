"""
Redis connection manager for the schedule store.

redis.asyncio connections are bound to the loop that opened them, and handlers
may drive each request through its own event loop, so one client is kept per
loop. Clients are created lazily; importing never opens a connection. Handlers
call close_redis() before their loop finishes so sockets are released.
"""

import asyncio
import os
import threading
import weakref
from dataclasses import dataclass

from redis.asyncio import Redis
from redis.exceptions import RedisError

from utils.get_logger import get_logger

logger = get_logger(__name__)


@dataclass
class RedisConfig:
    host: str
    port: int
    password: str | None
    db: int


class RedisManager:
    """Owns the Redis clients for this process, one per event loop."""

    # Entries disappear with their loop
    _clients: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Redis]" = (
        weakref.WeakKeyDictionary()
    )
    _lock = threading.Lock()

    @classmethod
    def get_config(cls) -> RedisConfig:
        return RedisConfig(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            password=os.getenv("REDIS_PASSWORD") or None,
            db=int(os.getenv("REDIS_DB", "0")),
        )

    @classmethod
    def get_redis(cls) -> Redis:
        """Get the Redis client for the running event loop."""
        loop = asyncio.get_running_loop()
        with cls._lock:
            client = cls._clients.get(loop)
            if client is None:
                config = cls.get_config()
                client = Redis(
                    host=config.host,
                    port=config.port,
                    password=config.password,
                    db=config.db,
                    decode_responses=True,
                    socket_timeout=10.0,
                    socket_connect_timeout=5.0,
                )
                cls._clients[loop] = client
                logger.debug(f"Created Redis client for {config.host}:{config.port}/{config.db}")
            return client

    @classmethod
    async def close_redis(cls) -> None:
        """Close and forget the running loop's client, if one was created."""
        loop = asyncio.get_running_loop()
        with cls._lock:
            client = cls._clients.pop(loop, None)
        if client is None:
            return
        try:
            await client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Error closing Redis client: {e}")


def get_redis() -> Redis:
    """Get the current Redis client. Must be called from inside a coroutine."""
    return RedisManager.get_redis()


async def close_redis() -> None:
    await RedisManager.close_redis()
