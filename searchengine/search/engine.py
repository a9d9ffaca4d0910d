"""Ranked full-text search over the lemma index.

Pipeline for one query:

    query lemmas → drop too-common lemmas → rarest-first intersection of
    postings → absolute relevance (sum of ranks) → relative relevance →
    stable sort → offset/limit → snippets
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from searchengine.config import Settings, settings as default_settings
from searchengine.db.lemmas import lemma_frequencies, page_ranks, pages_with_lemma
from searchengine.db.models import Page, Site
from searchengine.db.pages import count_pages, get_pages, list_page_ids
from searchengine.db.sites import find_site_by_url, get_site
from searchengine.scraper.extractor import extract_text, extract_title
from searchengine.search.models import SearchHit, SearchOutcome, SearchResponse
from searchengine.search.snippets import build_snippet
from searchengine.text.pipeline import TextPipeline

logger = logging.getLogger(__name__)


class SearchEngine:
    """Answers queries against the index held in *conn*."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        pipeline: TextPipeline,
        settings: Settings = default_settings,
    ) -> None:
        self.conn = conn
        self.pipeline = pipeline
        self.settings = settings

    def search(
        self,
        query: Optional[str],
        site: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResponse:
        """Search the index.

        Args:
            query: Free-text query.
            site: Restrict results to the site with this root URL.
            offset: Number of ranked results to skip.
            limit: Maximum number of results to return.

        Returns:
            A :class:`SearchResponse`.  Invalid queries and unknown sites are
            reported through ``result``/``outcome``, never raised.

        Raises:
            ValueError: If ``offset`` is negative or ``limit`` not positive.
        """
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        if limit <= 0:
            raise ValueError(f"limit must be > 0, got {limit}")

        if not query or not query.strip():
            return SearchResponse.failure(SearchOutcome.BLANK_QUERY, "Empty search query")

        query_lemmas = self.pipeline.query_lemmas(query)
        if not query_lemmas:
            return SearchResponse.failure(
                SearchOutcome.NO_VALID_TERMS, "No valid search terms in the query"
            )

        frequencies = lemma_frequencies(self.conn, query_lemmas)
        lemmas = self._discriminating(query_lemmas, frequencies)
        if not lemmas:
            logger.debug(f"All lemmas of {query!r} are too common")
            return SearchResponse.empty()

        site_row: Optional[Site] = None
        if site:
            site_row = self._find_site(site)
            if site_row is None or count_pages(self.conn, site_row.id) == 0:
                return SearchResponse.failure(
                    SearchOutcome.SITE_NOT_FOUND, "The requested site is not in the index"
                )
        site_id = site_row.id if site_row else None

        # Rarest first keeps the candidate set small.
        lemmas.sort(key=lambda lemma: (frequencies.get(lemma, 0), lemma))

        candidates = list_page_ids(self.conn, site_id)
        for lemma in lemmas:
            holders = pages_with_lemma(self.conn, lemma, site_id)
            candidates = [page_id for page_id in candidates if page_id in holders]
            if not candidates:
                return SearchResponse.empty()

        ranks = page_ranks(self.conn, candidates, query_lemmas)
        scored = [(page_id, ranks[page_id]) for page_id in candidates if ranks.get(page_id, 0) > 0]
        max_relevance = max((score for _, score in scored), default=1.0)
        # list.sort is stable, so equal scores keep candidate (page id) order.
        scored.sort(key=lambda item: item[1] / max_relevance, reverse=True)

        total = len(scored)
        window = scored[offset : offset + limit]
        pages = get_pages(self.conn, [page_id for page_id, _ in window])
        hits = [
            self._hit(pages[page_id], score, max_relevance, lemmas)
            for page_id, score in window
            if page_id in pages
        ]
        return SearchResponse(
            result=True,
            outcome=SearchOutcome.FOUND if total else SearchOutcome.EMPTY,
            count=total,
            data=hits,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _discriminating(self, query_lemmas: set[str], frequencies: dict[str, int]) -> list[str]:
        """Drop lemmas found on more than the threshold share of indexed pages."""
        total_pages = count_pages(self.conn)
        if total_pages == 0:
            return list(query_lemmas)
        threshold = self.settings.commonness_threshold
        return [
            lemma
            for lemma in query_lemmas
            if frequencies.get(lemma, 0) / total_pages <= threshold
        ]

    def _find_site(self, url: str) -> Optional[Site]:
        url = url.strip()
        for candidate in (url, url.rstrip("/"), url.rstrip("/") + "/"):
            site = find_site_by_url(self.conn, candidate)
            if site is not None:
                return site
        return None

    def _hit(self, page: Page, score: float, max_relevance: float, lemmas: list[str]) -> SearchHit:
        site = get_site(self.conn, page.site_id)
        title = extract_title(page.content)
        snippet = build_snippet(
            title,
            extract_text(page.content),
            lemmas,
            max_length=self.settings.snippet_max_length,
        )
        return SearchHit(
            site=site.url if site else "",
            site_name=site.name if site else "",
            uri=page.path,
            title=title,
            snippet=snippet,
            relevance=score / max_relevance,
            absolute_relevance=score,
        )
