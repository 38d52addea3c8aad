"""
Shared async Redis client, used for the distributed sweep locks.

asyncio.run() in Celery tasks creates a fresh event loop per call, so every
task closes the client again through close_redis().
"""
import redis.asyncio as aioredis

from app.core.config import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client
    if _client is None:
        _client = aioredis.from_url(settings.REDIS_URL, health_check_interval=30)
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
