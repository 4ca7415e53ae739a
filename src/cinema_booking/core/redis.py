"""
Redis client used for the seat map cache.

Every call degrades to a no-op when Redis is unreachable, so a missing
cache never fails a booking request.
"""
import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import redis.asyncio as redis

from cinema_booking.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CacheEncoder(json.JSONEncoder):
    """JSON encoder for enums and Decimal prices"""
    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class RedisClient:
    """Async Redis wrapper holding JSON values"""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self.redis: Optional[redis.Redis] = None

    @property
    def is_connected(self) -> bool:
        return self.redis is not None

    async def connect(self):
        client = redis.from_url(self.url, encoding="utf-8", decode_responses=True, max_connections=50)
        try:
            await client.ping()
        except Exception as e:
            logger.warning(f"Redis unavailable at {self.url}, seat map cache disabled: {e}")
            await client.aclose()
            return
        self.redis = client
        logger.info("Redis connected")

    async def close(self):
        if self.redis is None:
            return
        client, self.redis = self.redis, None
        await client.aclose()
        logger.info("Redis connection closed")

    async def _call(self, op: str, fn: Callable[[redis.Redis], Awaitable[T]], fallback: T) -> T:
        if self.redis is None:
            return fallback
        try:
            return await fn(self.redis)
        except Exception as e:
            logger.error(f"Redis {op} failed: {e}")
            return fallback

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._call('GET', lambda r: r.get(key), None)
        return json.loads(raw) if raw else None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        payload = json.dumps(value, cls=CacheEncoder)

        async def setex(r: redis.Redis) -> bool:
            await r.setex(key, ttl or settings.REDIS_CACHE_TTL, payload)
            return True

        return await self._call('SETEX', setex, False)

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return False

        async def unlink(r: redis.Redis) -> bool:
            await r.delete(*keys)
            return True

        return await self._call('DEL', unlink, False)


redis_client = RedisClient()
