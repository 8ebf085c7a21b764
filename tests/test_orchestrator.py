"""
Orchestrator Tests

Tests for Crawler seeding, worker pool validation and run_crawl wiring.
"""

import pytest
import redis
from unittest.mock import AsyncMock, MagicMock, patch

from imgcrawler.db.store import CrawlStore, StoreError
from imgcrawler.workers.orchestrator import Crawler, run_crawl


@pytest.mark.asyncio
async def test_seed_enqueues_canonical_url(store, make_fetcher):
    crawler = Crawler(store, make_fetcher())

    canonical = await crawler.seed("HTTP://Site.Test:80//index.html#top")

    assert canonical == "http://site.test/index.html"
    assert await store.claim_next() == "http://site.test/index.html"


@pytest.mark.asyncio
async def test_seed_rejects_non_http_url(store, make_fetcher):
    crawler = Crawler(store, make_fetcher())

    with pytest.raises(ValueError, match="Not a crawlable"):
        await crawler.seed("ftp://site.test/")

    assert await store.frontier_size() == 0


@pytest.mark.asyncio
async def test_run_n_requires_a_worker(store, make_fetcher):
    crawler = Crawler(store, make_fetcher())

    with pytest.raises(ValueError, match="at least 1"):
        await crawler.run_n(0)


@pytest.mark.asyncio
async def test_run_n_names_workers(store, make_fetcher):
    crawler = Crawler(store, make_fetcher(), poll_interval=0.01)

    statuses = await crawler.run_n(3)

    assert [s.name for s in statuses] == ["worker-1", "worker-2", "worker-3"]


@pytest.mark.asyncio
async def test_run_crawl_end_to_end(fake_redis, make_fetcher):
    fetcher = make_fetcher(
        {"http://site.test/": (["/a"], ["/logo.png"]), "http://site.test/a": ([], [])}
    )
    # Leftovers from an earlier crawl under the same prefix
    await fake_redis.sadd("run:visitedHREFs", "http://site.test/a")

    with patch(
        "imgcrawler.workers.orchestrator.CrawlStore.from_url",
        side_effect=lambda url, keys: CrawlStore(fake_redis, keys),
    ) as from_url, patch(
        "imgcrawler.workers.orchestrator.PageFetcher", return_value=fetcher
    ):
        report = await run_crawl(
            "http://site.test/",
            workers=2,
            redis_url="redis://store:6379/0",
            key_prefix="run:",
            poll_interval=0.01,
            reset=True,
        )

    assert from_url.call_args[0][0] == "redis://store:6379/0"
    assert report.seed_url == "http://site.test/"
    assert report.visited_urls == ["http://site.test/", "http://site.test/a"]
    assert report.image_urls == ["http://site.test/logo.png"]
    assert len(report.workers) == 2


@pytest.mark.asyncio
async def test_run_crawl_unreachable_store():
    client = MagicMock()
    client.ping = AsyncMock(side_effect=redis.ConnectionError("Connection refused"))
    client.aclose = AsyncMock()

    with patch(
        "imgcrawler.workers.orchestrator.CrawlStore.from_url",
        side_effect=lambda url, keys: CrawlStore(client, keys),
    ):
        with pytest.raises(StoreError, match="PING"):
            await run_crawl("http://site.test/", workers=1)

    client.aclose.assert_awaited_once()
