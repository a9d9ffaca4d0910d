"""Scraper package: page fetch & content extraction."""

from searchengine.scraper.extractor import extract_links, extract_text, extract_title
from searchengine.scraper.fetcher import build_client, fetch_page
from searchengine.scraper.models import FetchedPage

__all__ = [
    "build_client",
    "fetch_page",
    "extract_links",
    "extract_text",
    "extract_title",
    "FetchedPage",
]
