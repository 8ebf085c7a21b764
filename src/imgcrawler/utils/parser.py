"""
HTML Parser Utilities

Functions for extracting link and image references from HTML.
"""

import logging
import warnings

from bs4 import (
    BeautifulSoup,
    MarkupResemblesLocatorWarning,
    ParserRejectedMarkup,
    SoupStrainer,
)

warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

logger = logging.getLogger(__name__)

_ONLY_REFERENCES = SoupStrainer(["a", "img"])


def _attr(tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):
        value = value[0] if value else None
    return value


def extract_references(html: str) -> tuple[list[str], list[str]]:
    """
    Extract raw anchor hrefs and image srcs from HTML.

    Values are returned exactly as written in the page (unresolved). Tags
    without the attribute are ignored. Truncated or unbalanced markup keeps
    every tag read before the break, since html.parser recovers rather than
    stopping. The one exception is markup html.parser rejects as a whole
    (ParserRejectedMarkup), which in practice does not happen for decoded
    text; that page yields no references at all, not a partial result.

    Args:
        html: Raw HTML string

    Returns:
        Tuple of (hrefs, image_srcs)
    """
    try:
        soup = BeautifulSoup(html, "html.parser", parse_only=_ONLY_REFERENCES)
    except ParserRejectedMarkup as e:
        logger.warning(f"Unparseable markup, no references extracted: {e}")
        return [], []

    hrefs: list[str] = []
    image_srcs: list[str] = []
    for tag in soup.find_all(["a", "img"]):
        if tag.name == "a":
            href = _attr(tag, "href")
            if href is not None:
                hrefs.append(href)
        else:
            src = _attr(tag, "src")
            if src is not None:
                image_srcs.append(src)

    return hrefs, image_srcs
