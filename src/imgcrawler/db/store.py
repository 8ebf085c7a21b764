"""
Crawl Store

Atomic operations over the shared crawl state: the frontier, the visited set,
the active-worker counter and the image results. Each operation is a single
Redis command or a WATCH/MULTI transaction, so it is atomic with respect to
all other workers.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable

import redis
import redis.asyncio as aioredis

from imgcrawler.db.redis import get_redis

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Transport or protocol failure talking to the shared store."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Store operation {operation} failed: {cause}")
        self.operation = operation


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except redis.RedisError as e:
        raise StoreError(operation, e) from e


@dataclass(frozen=True)
class StoreKeys:
    active_workers: str = "activeWorkers"
    crawl_queue: str = "crawlQ"
    visited: str = "visitedHREFs"
    images: str = "imageSrcs"

    @classmethod
    def with_prefix(cls, prefix: str) -> "StoreKeys":
        """Namespace all keys so several crawls can share one Redis."""
        if not prefix:
            return cls()
        base = cls()
        return cls(
            active_workers=f"{prefix}{base.active_workers}",
            crawl_queue=f"{prefix}{base.crawl_queue}",
            visited=f"{prefix}{base.visited}",
            images=f"{prefix}{base.images}",
        )

    def all(self) -> tuple[str, ...]:
        return (self.active_workers, self.crawl_queue, self.visited, self.images)


class CrawlStore:
    """
    Shared store client.

    Wraps an async Redis client. Any Redis failure surfaces as StoreError;
    callers decide whether it is fatal.
    """

    def __init__(self, client: aioredis.Redis, keys: StoreKeys | None = None):
        self._redis = client
        self.keys = keys or StoreKeys()

    @classmethod
    def from_url(cls, url: str | None = None, keys: StoreKeys | None = None):
        return cls(get_redis(url), keys)

    # --- Frontier ---

    async def enqueue_seed(self, url: str) -> None:
        """Add a URL to the frontier unconditionally."""
        with _store_errors("SADD"):
            await self._redis.sadd(self.keys.crawl_queue, url)

    async def claim_next(self) -> str | None:
        """
        Remove and return an arbitrary frontier member.

        Returns:
            The claimed URL, or None when the frontier is empty
        """
        with _store_errors("SPOP"):
            return await self._redis.spop(self.keys.crawl_queue)

    async def frontier_size(self) -> int:
        with _store_errors("SCARD"):
            return int(await self._redis.scard(self.keys.crawl_queue))

    async def enqueue_links(self, urls: Iterable[str]) -> int:
        """Add discovered links to the frontier in one round trip."""
        return await self._add_batch(self.keys.crawl_queue, urls)

    # --- Visited / results ---

    async def mark_visited(self, url: str) -> bool:
        """
        Record a URL as visited.

        Returns:
            True if this call inserted it, False if it was already visited
        """
        with _store_errors("SADD"):
            added = await self._redis.sadd(self.keys.visited, url)
        return added == 1

    async def add_image_results(self, urls: Iterable[str]) -> int:
        return await self._add_batch(self.keys.images, urls)

    async def visited_urls(self) -> set[str]:
        with _store_errors("SMEMBERS"):
            return set(await self._redis.smembers(self.keys.visited))

    async def image_urls(self) -> set[str]:
        with _store_errors("SMEMBERS"):
            return set(await self._redis.smembers(self.keys.images))

    # --- Active-worker counter ---

    async def incr_active(self) -> int:
        with _store_errors("INCR"):
            return int(await self._redis.incr(self.keys.active_workers))

    async def decr_active(self) -> int:
        """
        Decrement the active-worker counter, never below zero.

        Uses WATCH/MULTI so the floor check and the DECR apply together; a
        concurrent change to the counter retries the check.
        """
        key = self.keys.active_workers
        with _store_errors("DECR"):
            async with self._redis.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(key)
                        current = await pipe.get(key)
                        if not current or int(current) <= 0:
                            # More decrements than increments
                            logger.warning(
                                f"Active-worker counter at {current or 0}, "
                                "not decrementing"
                            )
                            return 0
                        pipe.multi()
                        pipe.decr(key)
                        (active,) = await pipe.execute()
                        return int(active)
                    except redis.WatchError:
                        continue

    async def get_active(self) -> int:
        with _store_errors("GET"):
            value = await self._redis.get(self.keys.active_workers)
        return int(value) if value else 0

    # --- Maintenance ---

    async def ping(self) -> bool:
        with _store_errors("PING"):
            return bool(await self._redis.ping())

    async def reset(self) -> None:
        """Delete all crawl state under this store's keys."""
        with _store_errors("DEL"):
            await self._redis.delete(*self.keys.all())

    async def close(self) -> None:
        await self._redis.aclose()

    async def _add_batch(self, key: str, urls: Iterable[str]) -> int:
        urls = list(urls)
        if not urls:
            return 0

        with _store_errors("SADD"):
            async with self._redis.pipeline(transaction=False) as pipe:
                for u in urls:
                    pipe.sadd(key, u)
                results = await pipe.execute()
        return sum(int(r) for r in results)
