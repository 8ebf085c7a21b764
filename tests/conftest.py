"""
Test configuration and fixtures for crawler tests
"""

import asyncio
import os

# Set ENVIRONMENT before importing any modules that read configuration
os.environ.setdefault("ENVIRONMENT", "test")

import fakeredis
import pytest
from unittest.mock import AsyncMock, MagicMock

from imgcrawler.db.store import CrawlStore, StoreKeys
from imgcrawler.services.fetcher import FetchError


class FakeFetcher:
    """
    Serves a fixed link graph instead of the network.

    pages maps a URL to the (hrefs, image_srcs) found on it; unknown URLs
    behave like non-HTML resources.
    """

    def __init__(self, pages=None, errors=(), delay: float = 0.0):
        self.pages = pages or {}
        self.errors = set(errors)
        self.delay = delay
        self.calls: list[str] = []

    async def fetch_and_extract(self, url):
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.errors:
            raise FetchError(url, "connection refused")
        hrefs, image_srcs = self.pages.get(url, ([], []))
        return list(hrefs), list(image_srcs)


@pytest.fixture
def fake_redis():
    """In-memory async Redis with its own server, so tests never share data"""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(fake_redis):
    """CrawlStore backed by fakeredis"""
    return CrawlStore(fake_redis, StoreKeys.with_prefix("test:"))


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def mock_aiohttp_session():
    """Mock aiohttp ClientSession returning a small HTML page"""
    session = MagicMock()

    response = AsyncMock()
    response.status = 200
    response.headers = {"Content-Type": "text/html; charset=utf-8"}
    response.charset = "utf-8"
    response.content = MagicMock()
    response.content.read = AsyncMock(
        side_effect=[
            b'<html><body><a href="/next">Next</a><img src="logo.png"></body></html>',
            b"",
        ]
    )

    session.get.return_value.__aenter__.return_value = response
    return session
