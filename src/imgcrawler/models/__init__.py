"""
Models package initialization
"""

from imgcrawler.models.crawl import CrawlReport
from imgcrawler.models.worker import WorkerState, WorkerStatus

__all__ = ["CrawlReport", "WorkerState", "WorkerStatus"]
