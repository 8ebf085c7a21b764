"""
Page Fetcher

Fetches a page over HTTP and extracts the raw link and image references
from it. Non-HTML resources are skipped; transport failures raise FetchError.
"""

import asyncio
import logging

import aiohttp

from imgcrawler.core.config import settings
from imgcrawler.utils.parser import extract_references

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class FetchError(Exception):
    """A page could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


def create_session(
    user_agent: str | None = None, timeout_sec: float | None = None
) -> aiohttp.ClientSession:
    """Client session shared by all workers of one crawl."""
    timeout = aiohttp.ClientTimeout(total=timeout_sec or settings.CRAWL_TIMEOUT_SEC)
    connector = aiohttp.TCPConnector(ttl_dns_cache=300)
    return aiohttp.ClientSession(
        headers={"User-Agent": user_agent or settings.CRAWL_USER_AGENT},
        timeout=timeout,
        connector=connector,
    )


class PageFetcher:
    """Fetch-and-extract step of the crawl pipeline"""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_response_bytes: int | None = None,
    ):
        self._session = session
        self.max_response_bytes = max_response_bytes or settings.CRAWL_MAX_RESPONSE_BYTES

    async def fetch_and_extract(self, url: str) -> tuple[list[str], list[str]]:
        """
        Fetch url and extract its references.

        Args:
            url: Absolute URL to fetch

        Returns:
            Tuple of (hrefs, image_srcs), both empty for non-HTML responses

        Raises:
            FetchError: on network failure, timeout or an error status
        """
        try:
            async with self._session.get(url, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}")

                ct = resp.headers.get("Content-Type", "")
                if not ct.lower().startswith("text/html"):
                    logger.info(f"Skipping non-HTML page: {url} with content-type: {ct}")
                    return [], []

                body = await self._read_body(url, resp)
                html = _decode(body, resp.charset)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, extract_references, html)

    async def _read_body(self, url: str, resp) -> bytes:
        chunks: list[bytes] = []
        total = 0
        while total < self.max_response_bytes:
            chunk = await resp.content.read(
                min(READ_CHUNK_SIZE, self.max_response_bytes - total)
            )
            if not chunk:
                break
            chunks.append(chunk)
            total += len(chunk)
        else:
            logger.warning(
                f"Response truncated at {self.max_response_bytes} bytes: {url}"
            )
        return b"".join(chunks)


def _decode(body: bytes, charset: str | None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
