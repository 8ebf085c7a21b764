"""
URL Resolution

Resolves raw link values against the page they were found on and reduces
them to a canonical form. The canonical string is the key used for the
frontier, the visited set and the image results.
"""

import re
import string
from typing import Iterable, Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

MAX_URL_LENGTH = 2083

DEFAULT_PORTS = {"http": 80, "https": 443}

_UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")
_PCT_ESCAPE = re.compile(r"%([0-9A-Fa-f]{2})")
_DUPLICATE_SLASHES = re.compile(r"/{2,}")

# Sub-delims plus ":" and "@" are legal in a path segment
_PATH_SAFE = "/:@!$&'()*+,;=%"
# Query keys and values keep everything but the pair separator
_QUERY_SAFE = "/?:@!$'()*+,;=%"


def _normalize_escapes(component: str, safe: str) -> str:
    """Decode escaped unreserved characters, uppercase the rest, quote the illegal."""

    def _fix(m: re.Match) -> str:
        ch = chr(int(m.group(1), 16))
        if ch in _UNRESERVED:
            return ch
        return "%" + m.group(1).upper()

    return quote(_PCT_ESCAPE.sub(_fix, component), safe=safe)


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    out: list[str] = []
    for seg in segments:
        if seg == "..":
            if len(out) > 1:
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/".join(out)


def _normalize_path(path: str) -> str:
    path = _DUPLICATE_SLASHES.sub("/", path)
    path = _remove_dot_segments(path)
    path = _normalize_escapes(path, _PATH_SAFE)
    return path or "/"


def _normalize_query(query: str) -> str:
    """Sort parameters without decoding them, so escaped bytes survive as written."""
    if not query:
        return ""
    params = []
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params.append(
            (_normalize_escapes(key, _QUERY_SAFE), _normalize_escapes(value, _QUERY_SAFE))
        )
    params.sort()
    return "&".join(f"{k}={v}" for k, v in params)


def _normalize_netloc(parts) -> Optional[str]:
    host = (parts.hostname or "").lower()
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"

    port = parts.port  # raises ValueError on a malformed port
    scheme = parts.scheme.lower()
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    userinfo, sep, _ = parts.netloc.rpartition("@")
    if sep:
        return f"{userinfo}@{host}"
    return host


def canonicalize_url(url: str) -> Optional[str]:
    """
    Reduce an absolute http(s) URL to its canonical form.

    Lowercases scheme and host, drops default ports and the fragment,
    collapses duplicate slashes and dot segments, sorts query parameters and
    normalizes percent-escapes.

    Returns:
        The canonical URL, or None if the URL is not a usable http(s) URL
    """
    try:
        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            return None
        netloc = _normalize_netloc(parts)
    except ValueError:
        return None

    if not netloc:
        return None

    canonical = urlunsplit(
        (scheme, netloc, _normalize_path(parts.path), _normalize_query(parts.query), "")
    )
    if len(canonical) > MAX_URL_LENGTH:
        return None
    return canonical


def get_host(url: str) -> str:
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def resolve_urls(
    base_url: str,
    raw_links: Iterable[str | None],
    restrict_to_same_origin: bool,
) -> list[str]:
    """
    Resolve raw link values found on base_url into canonical absolute URLs.

    Args:
        base_url: URL of the page the links were found on
        raw_links: Attribute values exactly as they appeared in the page
        restrict_to_same_origin: Drop links whose host differs from base_url's

    Returns:
        Canonical URLs, first-seen order, without duplicates. Malformed and
        non-http(s) links are silently dropped.
    """
    base_host = get_host(base_url)
    if not base_host:
        return []

    resolved: list[str] = []
    seen: set[str] = set()
    for link in raw_links:
        if not link or not link.strip():
            continue
        try:
            absolute = urljoin(base_url, link.strip())
        except ValueError:
            continue

        if restrict_to_same_origin and get_host(absolute) != base_host:
            continue

        canonical = canonicalize_url(absolute)
        if canonical and canonical not in seen:
            seen.add(canonical)
            resolved.append(canonical)

    return resolved
