"""Crawling and indexing package."""

from searchengine.indexing.cancellation import CancellationToken
from searchengine.indexing.service import STOPPED_BY_USER, IndexingResponse, IndexingService
from searchengine.indexing.writer import save_page

__all__ = [
    "CancellationToken",
    "IndexingResponse",
    "IndexingService",
    "STOPPED_BY_USER",
    "save_page",
]
