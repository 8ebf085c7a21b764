"""
Services package initialization
"""

from imgcrawler.services.fetcher import FetchError, PageFetcher, create_session

__all__ = ["FetchError", "PageFetcher", "create_session"]
