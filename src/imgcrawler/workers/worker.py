"""
Crawl Worker

A single crawl loop. The worker claims URLs from the shared frontier until it
is empty, then waits for either new work or global quiescence.

Quiescence is detected by polling: the worker whose decrement of the active
counter reaches zero while the frontier is empty declares the crawl finished.
Sleeping workers re-check the frontier size and the active counter every
poll interval. A worker can briefly observe zero active workers while another
is between its decrement and re-increment; this race is accepted.
"""

import asyncio
import logging
from dataclasses import dataclass

from imgcrawler.core.config import settings
from imgcrawler.db.store import CrawlStore, StoreError
from imgcrawler.models.worker import WorkerState, WorkerStatus
from imgcrawler.services.fetcher import FetchError, PageFetcher
from imgcrawler.utils.urls import resolve_urls

logger = logging.getLogger(__name__)


@dataclass
class WorkerStats:
    pages_crawled: int = 0
    duplicates_skipped: int = 0
    fetch_errors: int = 0
    links_enqueued: int = 0
    images_found: int = 0
    activations: int = 0


class Worker:
    """
    Crawl worker state machine.

    IDLE -> ACTIVE -> (QUIESCENCE_CHECK <-> SLEEPING) -> TERMINATED

    A store failure ends the worker in FAILED instead. A worker runs once;
    there is no way back from a terminal state.
    """

    def __init__(
        self,
        store: CrawlStore,
        fetcher: PageFetcher,
        name: str = "worker",
        poll_interval: float | None = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.name = name
        self.poll_interval = (
            settings.CRAWL_POLL_INTERVAL_SEC if poll_interval is None else poll_interval
        )
        self.state = WorkerState.IDLE
        self.stats = WorkerStats()
        self.error: str | None = None
        self._holds_active_slot = False

    async def run(self) -> WorkerStatus:
        """Run the state machine to a terminal state."""
        if self.state != WorkerState.IDLE:
            raise RuntimeError(f"{self.name} has already run")

        try:
            await self._run()
        except StoreError as e:
            logger.error(f"{self.name} stopping on store failure: {e}")
            self.error = str(e)
            await self._release_active_slot()
            self.state = WorkerState.FAILED

        return self.status()

    def status(self) -> WorkerStatus:
        return WorkerStatus(
            name=self.name,
            state=self.state,
            error=self.error,
            pages_crawled=self.stats.pages_crawled,
            duplicates_skipped=self.stats.duplicates_skipped,
            fetch_errors=self.stats.fetch_errors,
            links_enqueued=self.stats.links_enqueued,
            images_found=self.stats.images_found,
            activations=self.stats.activations,
        )

    async def _run(self) -> None:
        while True:
            await self._activate()
            await self._crawl()
            active = await self._deactivate()

            self.state = WorkerState.QUIESCENCE_CHECK
            if not await self._wait_for_work(active):
                break

        self.state = WorkerState.TERMINATED
        logger.info(f"{self.name} finished: no active workers and frontier empty")

    async def _activate(self) -> None:
        await self.store.incr_active()
        self._holds_active_slot = True
        self.state = WorkerState.ACTIVE
        self.stats.activations += 1

    async def _deactivate(self) -> int:
        # A DECR whose reply is lost may still have applied; never release twice
        self._holds_active_slot = False
        return await self.store.decr_active()

    async def _release_active_slot(self) -> None:
        if not self._holds_active_slot:
            return
        try:
            await self.store.decr_active()
            self._holds_active_slot = False
        except StoreError as e:
            logger.error(f"{self.name} could not release its active slot: {e}")

    async def _wait_for_work(self, active: int) -> bool:
        """
        Poll until the frontier refills or no worker is active.

        Returns:
            True if there is new work, False on quiescence
        """
        while active > 0:
            self.state = WorkerState.SLEEPING
            await asyncio.sleep(self.poll_interval)

            if await self.store.frontier_size() > 0:
                return True

            self.state = WorkerState.QUIESCENCE_CHECK
            active = await self.store.get_active()
        return False

    async def _crawl(self) -> None:
        """Claim and process URLs until the frontier is observed empty."""
        while True:
            url = await self.store.claim_next()
            if url is None:
                return

            if not await self.store.mark_visited(url):
                self.stats.duplicates_skipped += 1
                continue

            await self._process(url)

    async def _process(self, url: str) -> None:
        logger.info(f"Crawling: {url}")
        try:
            hrefs, image_srcs = await self.fetcher.fetch_and_extract(url)
        except FetchError as e:
            logger.warning(f"{self.name}: {e}")
            self.stats.fetch_errors += 1
            return
        except Exception as e:
            logger.error(f"Unexpected error extracting {url}: {e}", exc_info=True)
            self.stats.fetch_errors += 1
            return

        images = resolve_urls(url, image_srcs, restrict_to_same_origin=False)
        links = resolve_urls(url, hrefs, restrict_to_same_origin=True)

        self.stats.images_found += await self.store.add_image_results(images)
        self.stats.links_enqueued += await self.store.enqueue_links(links)
        self.stats.pages_crawled += 1
        logger.debug(
            f"{url}: {len(links)} links, {len(images)} images ({self.name})"
        )
