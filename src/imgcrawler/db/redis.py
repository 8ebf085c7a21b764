import redis.asyncio as aioredis

from imgcrawler.core.config import settings


def get_redis(url: str | None = None) -> aioredis.Redis:
    return aioredis.Redis.from_url(url or settings.REDIS_URL, decode_responses=True)
