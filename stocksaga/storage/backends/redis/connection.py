"""
Shared Redis connection handling for the Redis store backends

Requires: pip install redis
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from stocksaga.core.logger import get_logger
from stocksaga.storage.core.errors import StoreUnavailableError

logger = get_logger(__name__)

T = TypeVar("T")


class RedisConnection:
    """
    Lazily-created ``redis.asyncio`` client shared by the Redis stores

    Connection and timeout errors raised by redis-py are translated into
    ``StoreUnavailableError`` so callers only ever see the store error family.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379", key_prefix: str = "stocksaga:", **redis_kwargs):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.redis_kwargs = redis_kwargs
        self._redis: Any = None

    async def client(self):
        """Get Redis connection, creating if necessary"""
        if self._redis is None:
            try:
                self._redis = redis.from_url(self.redis_url, decode_responses=True, **self.redis_kwargs)
                await self._redis.ping()
            except (RedisConnectionError, RedisTimeoutError, OSError) as e:
                self._redis = None
                msg = f"Failed to connect to Redis: {e}"
                raise StoreUnavailableError(msg, backend="redis", url=self.redis_url) from e
        return self._redis

    async def call(self, operation: Awaitable[T]) -> T:
        """Await a redis-py call, mapping transport errors to StoreUnavailableError"""
        try:
            return await operation
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.warning(f"Redis call failed: {e}")
            raise StoreUnavailableError(
                f"Redis call failed: {e}", backend="redis", url=self.redis_url
            ) from e

    def key(self, *parts: str) -> str:
        return self.key_prefix + ":".join(parts)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
