import redis.asyncio as aioredis

from shared.config.settings import REDIS_URL

_redis: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    """Lazily created process-wide client; connections are opened on first use."""
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(REDIS_URL, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
