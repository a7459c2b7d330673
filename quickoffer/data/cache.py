"""Redis-backed memoization for slow-changing lookups (market ids).

Redis is optional: when it is disabled or unreachable, calls go straight
through to the wrapped function.
"""

import functools
import inspect
import json
import logging
from typing import Any, Awaitable, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from quickoffer.config import settings

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "quickoffer"

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
    """e.g. cache_key("parcl:markets", "43215", "OH") -> "quickoffer:parcl:markets:43215:OH"."""
    parts = [str(a).strip().upper() for a in args]
    parts += [f"{k}={str(v).strip().upper()}" for k, v in sorted(kwargs.items())]
    return ":".join([KEY_NAMESPACE, prefix, *parts])


def cached(prefix: str, ttl_seconds: int) -> Callable:
    """Memoize an async method's JSON-serializable result in Redis.

    Arguments are bound to the signature first, so positional and keyword
    calls share one key. The first argument (self) is left out of the key.
    None results are never stored, so a miss is retried on the next call.
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            if not settings.cache_enabled:
                return await func(self, *args, **kwargs)

            bound = signature.bind(self, *args, **kwargs)
            bound.apply_defaults()
            key = cache_key(prefix, *list(bound.arguments.values())[1:])
            client = get_redis()
            try:
                hit = await client.get(key)
            except RedisError as e:
                logger.warning("Redis unavailable, bypassing cache for %s: %s", key, e)
                return await func(self, *args, **kwargs)

            if hit is not None:
                logger.debug("Cache hit: %s", key)
                return json.loads(hit)

            result = await func(self, *args, **kwargs)
            if result is None:
                return None

            try:
                await client.set(key, json.dumps(result), ex=ttl_seconds)
            except RedisError as e:
                logger.warning("Failed to write cache for %s: %s", key, e)
            return result
        return wrapper
    return decorator
