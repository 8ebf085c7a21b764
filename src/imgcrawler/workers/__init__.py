"""
Workers package initialization
"""

from imgcrawler.workers.orchestrator import Crawler, run_crawl
from imgcrawler.workers.worker import Worker, WorkerStats

__all__ = ["Crawler", "run_crawl", "Worker", "WorkerStats"]
