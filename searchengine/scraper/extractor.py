"""Content extraction: title, visible text and outbound links of a page."""

from __future__ import annotations

from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

# Elements whose text is never shown to a reader.
_INVISIBLE_TAGS = ["script", "style", "noscript", "template", "head", "title"]


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    soup = _soup(html)
    if soup.title is None:
        return ""
    return soup.title.get_text(strip=True)


def extract_text(html: str) -> str:
    """Return the visible text of *html*, whitespace-collapsed."""
    soup = _soup(html)
    for tag in soup(_INVISIBLE_TAGS):
        tag.decompose()
    return " ".join(soup.get_text(separator=" ").split())


def extract_links(html: str, base_url: str) -> List[str]:
    """Return deduplicated absolute href values from ``<a>`` tags.

    Fragment-only links (``#anchor``) and empty hrefs are excluded.
    """
    soup = _soup(html)
    seen: set[str] = set()
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith("#"):
            continue
        absolute = urljoin(base_url, href)
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links
