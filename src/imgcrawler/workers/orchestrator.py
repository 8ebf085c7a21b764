"""
Crawl Orchestrator

Seeds the shared frontier and runs a pool of workers until every one of them
reaches a terminal state.
"""

import asyncio
import logging

from imgcrawler.core.config import settings
from imgcrawler.db.store import CrawlStore, StoreKeys
from imgcrawler.models.crawl import CrawlReport
from imgcrawler.models.worker import WorkerStatus
from imgcrawler.services.fetcher import PageFetcher, create_session
from imgcrawler.utils.urls import canonicalize_url
from imgcrawler.workers.worker import Worker

logger = logging.getLogger(__name__)


class Crawler:
    """Runs N symmetric workers against one shared store"""

    def __init__(
        self,
        store: CrawlStore,
        fetcher: PageFetcher,
        poll_interval: float | None = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.poll_interval = poll_interval
        self.seed_url: str | None = None
        self.workers: list[Worker] = []

    async def seed(self, url: str) -> str:
        """
        Add the seed URL to the frontier.

        Returns:
            The canonical form that was enqueued

        Raises:
            ValueError: if url is not an absolute http(s) URL
        """
        canonical = canonicalize_url(url)
        if canonical is None:
            raise ValueError(f"Not a crawlable http(s) URL: {url!r}")

        await self.store.enqueue_seed(canonical)
        self.seed_url = canonical
        logger.info(f"Seeded frontier with {canonical}")
        return canonical

    async def run_n(self, n: int) -> list[WorkerStatus]:
        """Run n workers concurrently and wait for all of them to finish."""
        if n < 1:
            raise ValueError(f"Worker count must be at least 1, got {n}")

        self.workers = [
            Worker(
                self.store,
                self.fetcher,
                name=f"worker-{i + 1}",
                poll_interval=self.poll_interval,
            )
            for i in range(n)
        ]
        logger.info(f"Starting {n} workers")

        statuses = await asyncio.gather(*(w.run() for w in self.workers))

        failed = [s.name for s in statuses if s.error]
        if failed:
            logger.warning(f"Workers stopped on store failure: {', '.join(failed)}")
        logger.info("All workers finished")
        return list(statuses)

    async def report(self) -> CrawlReport:
        """Read the final result sets back from the store."""
        return CrawlReport(
            seed_url=self.seed_url or "",
            visited_urls=sorted(await self.store.visited_urls()),
            image_urls=sorted(await self.store.image_urls()),
            workers=[w.status() for w in self.workers],
        )


async def run_crawl(
    seed_url: str,
    workers: int | None = None,
    redis_url: str | None = None,
    key_prefix: str | None = None,
    poll_interval: float | None = None,
    reset: bool = False,
) -> CrawlReport:
    """
    Crawl from seed_url with a fresh store connection and HTTP session.

    Raises:
        StoreError: if the store is unreachable before the crawl starts
        ValueError: if seed_url is not crawlable or workers < 1
    """
    keys = StoreKeys.with_prefix(
        settings.CRAWL_KEY_PREFIX if key_prefix is None else key_prefix
    )
    store = CrawlStore.from_url(redis_url or settings.REDIS_URL, keys)
    try:
        await store.ping()
        if reset:
            logger.info("Clearing previous crawl state")
            await store.reset()

        async with create_session() as session:
            crawler = Crawler(store, PageFetcher(session), poll_interval=poll_interval)
            await crawler.seed(seed_url)
            await crawler.run_n(workers or settings.CRAWL_WORKERS)
            return await crawler.report()
    finally:
        await store.close()
