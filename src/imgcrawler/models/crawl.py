"""
Crawl Models

Final report of a crawl run, read back from the shared store.
"""

from pydantic import BaseModel, Field

from imgcrawler.models.worker import WorkerState, WorkerStatus


class CrawlReport(BaseModel):
    """Visited pages, collected images and per-worker outcome"""

    seed_url: str
    visited_urls: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    workers: list[WorkerStatus] = Field(default_factory=list)

    @property
    def failed_workers(self) -> list[WorkerStatus]:
        return [w for w in self.workers if w.state == WorkerState.FAILED]
