"""
Worker Models

Lifecycle states and status snapshots for crawl workers.
"""

from enum import Enum

from pydantic import BaseModel, Field


class WorkerState(str, Enum):
    """Crawl worker lifecycle state"""

    IDLE = "idle"
    ACTIVE = "active"
    QUIESCENCE_CHECK = "quiescence_check"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"
    FAILED = "failed"


class WorkerStatus(BaseModel):
    """Snapshot of one worker's progress"""

    name: str
    state: WorkerState
    pages_crawled: int = Field(default=0, description="Pages fetched and extracted")
    duplicates_skipped: int = Field(
        default=0, description="Claims dropped because the URL was already visited"
    )
    fetch_errors: int = 0
    links_enqueued: int = 0
    images_found: int = Field(default=0, description="Image URLs new to the result set")
    activations: int = Field(
        default=0, description="Times the worker entered an extraction cycle"
    )
    error: str | None = None
