"""
Shared Store Layer

Redis-backed coordination state shared by every crawl worker.
"""

from imgcrawler.db.store import CrawlStore, StoreError, StoreKeys

__all__ = ["CrawlStore", "StoreError", "StoreKeys"]
