"""
Utilities package initialization
"""

from imgcrawler.utils.parser import extract_references
from imgcrawler.utils.urls import canonicalize_url, resolve_urls

__all__ = ["extract_references", "canonicalize_url", "resolve_urls"]
