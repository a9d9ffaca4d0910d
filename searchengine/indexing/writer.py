"""Indexing write path: replace a page and its postings in one transaction.

    delete old page (lemma frequencies decremented) → insert page →
    per lemma: upsert lemma (+1 document frequency) → upsert posting (rank)
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Mapping

from searchengine.db.lemmas import upsert_index_entry, upsert_lemma
from searchengine.db.models import Page
from searchengine.db.pages import delete_page, find_page, insert_page
from searchengine.errors import StorageError

logger = logging.getLogger(__name__)


def save_page(
    conn: sqlite3.Connection,
    site_id: int,
    path: str,
    code: int,
    content: str,
    lemma_counts: Mapping[str, int],
) -> Page:
    """Store a freshly fetched page and its lemma postings.

    Any page previously stored at ``path`` for the site is removed first,
    together with its postings, so re-crawling a page never duplicates
    postings nor inflates lemma frequencies.

    Args:
        conn: Open DB connection owned by the calling thread.
        site_id: Owning site.
        path: URL path relative to the site root.
        code: HTTP status code of the fetch.
        content: Raw page markup.
        lemma_counts: ``{lemma: occurrences in this page}``.

    Returns:
        The newly inserted :class:`~searchengine.db.models.Page`.

    Raises:
        StorageError: If any statement fails; the transaction is rolled back.
    """
    try:
        with conn:
            previous = find_page(conn, site_id, path)
            if previous is not None:
                delete_page(conn, previous.id)

            page = insert_page(conn, site_id, path, code, content)
            for lemma, count in lemma_counts.items():
                lemma_id = upsert_lemma(conn, site_id, lemma)
                upsert_index_entry(conn, page.id, lemma_id, count)
    except sqlite3.Error as exc:
        raise StorageError(f"Could not store page {path!r}: {exc}") from exc

    logger.debug(f"Stored {path} ({len(lemma_counts)} lemmas)")
    return page
