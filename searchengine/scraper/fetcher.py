"""HTTP fetcher for the crawler.

Redirects are not followed: a 3xx response is returned as-is so the crawler
can skip it.  Error statuses are returned too; only transport failures
(DNS, refused connection, timeout) raise :class:`FetchError`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from searchengine.config import Settings, settings
from searchengine.errors import FetchError
from searchengine.scraper.extractor import extract_links, extract_text, extract_title
from searchengine.scraper.models import FetchedPage

logger = logging.getLogger(__name__)


def default_headers(config: Optional[Settings] = None) -> dict[str, str]:
    config = config or settings
    return {
        "User-Agent": config.user_agent,
        "Referer": config.referrer,
    }


def build_client(
    timeout: Optional[float] = None, config: Optional[Settings] = None
) -> httpx.Client:
    """Return an ``httpx.Client`` configured with the crawler identity.

    *config* defaults to the process-wide settings; an indexing service
    passes its own so its timeout and identity apply.
    """
    config = config or settings
    return httpx.Client(
        headers=default_headers(config),
        timeout=config.request_timeout if timeout is None else timeout,
        follow_redirects=False,
    )


def _is_html(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "text/html")
    return "html" in content_type.lower()


def fetch_page(url: str, client: Optional[httpx.Client] = None) -> FetchedPage:
    """Fetch *url* and return a :class:`FetchedPage`.

    Args:
        url: Absolute URL to fetch.
        client: Reuse an existing client (one per crawl task); a short-lived
            client is created when omitted.

    Raises:
        FetchError: On any transport-level failure, including timeouts.
    """
    owns_client = client is None
    http = client or build_client()
    try:
        response = http.get(url)
    except httpx.HTTPError as exc:
        raise FetchError(url, str(exc) or type(exc).__name__) from exc
    finally:
        if owns_client:
            http.close()

    page = FetchedPage(url=url, status_code=response.status_code)
    if not page.is_success or not _is_html(response):
        logger.debug(f"{url} answered {response.status_code}, content not parsed")
        return page

    html = response.text
    page.html = html
    page.title = extract_title(html)
    page.text = extract_text(html)
    page.links = extract_links(html, str(response.url))
    return page
