import json
from typing import Any, Optional

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from shared.config.settings import PRODUCT_CACHE_TTL_SECONDS

from .redis_client import get_redis

logger = structlog.get_logger(__name__)


class CacheService:
    """JSON key/value cache with TTL. A cache outage degrades to a miss, never to an error."""

    def __init__(self, redis: aioredis.Redis, default_ttl: int = PRODUCT_CACHE_TTL_SECONDS):
        self.redis = redis
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self.redis.get(key)
            if not value:
                return None
            return json.loads(value)
        except (RedisError, OSError, ValueError) as exc:
            logger.error("cache_get_failed", key=key, error=str(exc))
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            await self.redis.set(key, json.dumps(value, default=str), ex=ttl or self.default_ttl)
        except (RedisError, OSError, TypeError, ValueError) as exc:
            logger.error("cache_set_failed", key=key, error=str(exc))

    async def invalidate(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.redis.delete(*keys)
        except (RedisError, OSError) as exc:
            logger.error("cache_invalidate_failed", keys=list(keys), error=str(exc))


def get_cache() -> CacheService:
    return CacheService(get_redis())
