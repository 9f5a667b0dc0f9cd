"""
Redis TTL cache in front of analytics calls.

get_or_fetch() returns the cached JSON when present and decodable; otherwise
it awaits the fetch function, stores the result with SETEX and returns it.
Redis errors are logged and fall through to a fresh fetch.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "solwatch:metrics"
DEFAULT_TTL_SEC = 300


def cache_key(*parts: Any) -> str:
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])


class MetricsCache:
    def __init__(self, client: Any, *, ttl_sec: int = DEFAULT_TTL_SEC) -> None:
        """client: a redis.asyncio.Redis (or compatible) created with decode_responses=True."""
        self._redis = client
        self._ttl = ttl_sec

    @classmethod
    def from_url(cls, redis_url: str, *, ttl_sec: int = DEFAULT_TTL_SEC) -> "MetricsCache":
        client = redis_asyncio.from_url(redis_url, decode_responses=True, socket_timeout=3)
        return cls(client, ttl_sec=ttl_sec)

    async def get_or_fetch(self, key_parts: tuple[Any, ...], fetch: Callable[[], Awaitable[Any]]) -> Any:
        key = cache_key(*key_parts)
        try:
            cached = await self._redis.get(key)
        except RedisError as e:
            logger.warning("metrics_cache_get_failed", key=key, error=str(e))
            cached = None
        if cached:
            try:
                return json.loads(cached)
            except (TypeError, json.JSONDecodeError):
                logger.warning("metrics_cache_corrupt_entry", key=key)
        fresh = await fetch()
        try:
            await self._redis.setex(key, self._ttl, json.dumps(fresh))
        except RedisError as e:
            logger.warning("metrics_cache_set_failed", key=key, error=str(e))
        return fresh

    async def invalidate(self, key_parts: tuple[Any, ...]) -> None:
        await self._redis.delete(cache_key(*key_parts))

    async def aclose(self) -> None:
        await self._redis.aclose()
