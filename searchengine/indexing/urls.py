"""URL helpers for the crawler."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse, urlunparse

_VALID_URL_RE = re.compile(
    r"^https?://([a-z0-9-]+\.)*[a-z0-9-]+(:[0-9]+)?(/.*)?$", re.IGNORECASE
)

# Links to these resources are never enqueued.
SKIPPED_EXTENSIONS = frozenset(
    {
        ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico", ".bmp",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".rar", ".gz", ".tar", ".7z",
        ".mp3", ".mp4", ".avi", ".mov", ".wav",
        ".css", ".js", ".json", ".xml", ".rss",
    }
)


def is_valid_url(url: str) -> bool:
    return bool(url) and _VALID_URL_RE.match(url.strip()) is not None


def get_domain(url: str) -> str:
    """Extract the host (without port) from a URL."""
    return (urlparse(url).hostname or "").lower()


def normalize_url(url: str) -> str:
    """Normalize a URL by removing fragments and trailing slashes."""
    parsed = urlparse(url.strip())
    path = parsed.path or "/"
    if path.endswith("/") and len(path) > 1:
        path = path.rstrip("/") or "/"
    parsed = parsed._replace(
        scheme=parsed.scheme.lower(),
        netloc=parsed.netloc.lower(),
        path=path,
        params="",
        fragment="",
    )
    return urlunparse(parsed)


def is_same_site(url: str, site_url: str) -> bool:
    """``True`` if *url* lives under the site root *site_url*."""
    target = urlparse(normalize_url(url))
    root = urlparse(normalize_url(site_url))
    if target.netloc != root.netloc:
        return False
    if root.path in ("", "/"):
        return True
    return target.path == root.path or target.path.startswith(root.path + "/")


def is_crawlable(url: str) -> bool:
    """Only http(s) links to documents that may be HTML are followed."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    path = parsed.path.lower()
    dot = path.rfind(".")
    if dot != -1 and "/" not in path[dot:]:
        return path[dot:] not in SKIPPED_EXTENSIONS
    return True


def site_path(url: str, site_url: str) -> str:
    """Return the path of *url* relative to the site root, ``/`` for the root.

    The query string is kept; two pages differing only by query are
    different pages.
    """
    target = urlparse(normalize_url(url))
    root = urlparse(normalize_url(site_url))
    path = target.path
    root_path = root.path.rstrip("/")
    if root_path and path.startswith(root_path):
        path = path[len(root_path) :]
    if not path.startswith("/"):
        path = "/" + path
    if target.query:
        path = f"{path}?{target.query}"
    return path


def match_site(url: str, site_urls: list[str]) -> Optional[str]:
    """Return the configured site root that *url* belongs to (longest match)."""
    matches = [s for s in site_urls if is_same_site(url, s)]
    if not matches:
        return None
    return max(matches, key=lambda s: len(normalize_url(s)))
