"""Lemma catalogue and postings (``lemmas`` and ``index_entries`` tables).

``lemmas.frequency`` is a document frequency: the number of pages of the
site that contain the lemma.  ``index_entries.rank`` is the number of
occurrences of the lemma inside one page.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from searchengine.db.models import IndexEntry, Lemma

_CHUNK = 500


def _row_to_lemma(row: sqlite3.Row) -> Lemma:
    return Lemma(
        id=row["id"],
        site_id=row["site_id"],
        lemma=row["lemma"],
        frequency=row["frequency"],
    )


# ---------------------------------------------------------------------------
# Writes (run inside the caller's transaction)
# ---------------------------------------------------------------------------

def upsert_lemma(conn: sqlite3.Connection, site_id: int, lemma: str) -> int:
    """Count one more page for ``lemma`` on a site and return the lemma id.

    Inserts the lemma with frequency 1, or increments an existing row by
    exactly 1.  A single ``INSERT … ON CONFLICT`` statement, so concurrent
    writers never lose an increment.
    """
    row = conn.execute(
        """
        INSERT INTO lemmas (site_id, lemma, frequency) VALUES (?, ?, 1)
        ON CONFLICT (site_id, lemma) DO UPDATE SET frequency = frequency + 1
        RETURNING id
        """,
        (site_id, lemma),
    ).fetchone()
    return row[0]


def upsert_index_entry(
    conn: sqlite3.Connection,
    page_id: int,
    lemma_id: int,
    rank: float,
) -> None:
    """Insert the posting for (page, lemma), or overwrite its rank."""
    conn.execute(
        """
        INSERT INTO index_entries (page_id, lemma_id, rank) VALUES (?, ?, ?)
        ON CONFLICT (page_id, lemma_id) DO UPDATE SET rank = excluded.rank
        """,
        (page_id, lemma_id, float(rank)),
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_lemma(conn: sqlite3.Connection, site_id: int, lemma: str) -> Optional[Lemma]:
    row = conn.execute(
        "SELECT * FROM lemmas WHERE site_id = ? AND lemma = ?", (site_id, lemma)
    ).fetchone()
    return _row_to_lemma(row) if row else None


def count_lemmas(conn: sqlite3.Connection, site_id: Optional[int] = None) -> int:
    if site_id is not None:
        row = conn.execute(
            "SELECT COUNT(*) FROM lemmas WHERE site_id = ?", (site_id,)
        ).fetchone()
    else:
        row = conn.execute("SELECT COUNT(*) FROM lemmas").fetchone()
    return row[0]


def lemma_frequencies(
    conn: sqlite3.Connection,
    lemmas: Optional[Iterable[str]] = None,
) -> dict[str, int]:
    """Return ``{lemma: document frequency}`` summed over all sites.

    Restricted to ``lemmas`` when given; lemmas absent from the index are
    simply missing from the result.
    """
    if lemmas is None:
        rows = conn.execute(
            "SELECT lemma, SUM(frequency) AS df FROM lemmas GROUP BY lemma"
        ).fetchall()
        return {r["lemma"]: r["df"] for r in rows}

    wanted = list(lemmas)
    result: dict[str, int] = {}
    for start in range(0, len(wanted), _CHUNK):
        chunk = wanted[start : start + _CHUNK]
        placeholders = ",".join("?" for _ in chunk)
        rows = conn.execute(
            f"""
            SELECT lemma, SUM(frequency) AS df FROM lemmas
            WHERE lemma IN ({placeholders})
            GROUP BY lemma
            """,  # noqa: S608
            chunk,
        ).fetchall()
        result.update({r["lemma"]: r["df"] for r in rows})
    return result


def pages_with_lemma(
    conn: sqlite3.Connection,
    lemma: str,
    site_id: Optional[int] = None,
) -> set[int]:
    """Return the ids of pages holding a posting for ``lemma``."""
    sql = """
        SELECT e.page_id
        FROM   index_entries e
        JOIN   lemmas l ON l.id = e.lemma_id
        WHERE  l.lemma = ?
    """
    params: list = [lemma]
    if site_id is not None:
        sql += " AND l.site_id = ?"
        params.append(site_id)
    return {r["page_id"] for r in conn.execute(sql, params).fetchall()}


def page_ranks(
    conn: sqlite3.Connection,
    page_ids: Iterable[int],
    lemmas: Iterable[str],
) -> dict[int, float]:
    """Return ``{page_id: sum of rank}`` over the given lemmas.

    Pages with no posting for any of the lemmas are absent.
    """
    ids = list(page_ids)
    words = list(lemmas)
    if not ids or not words:
        return {}

    word_marks = ",".join("?" for _ in words)
    ranks: dict[int, float] = {}
    for start in range(0, len(ids), _CHUNK):
        chunk = ids[start : start + _CHUNK]
        id_marks = ",".join("?" for _ in chunk)
        rows = conn.execute(
            f"""
            SELECT e.page_id, SUM(e.rank) AS total
            FROM   index_entries e
            JOIN   lemmas l ON l.id = e.lemma_id
            WHERE  e.page_id IN ({id_marks}) AND l.lemma IN ({word_marks})
            GROUP  BY e.page_id
            """,  # noqa: S608
            [*chunk, *words],
        ).fetchall()
        ranks.update({r["page_id"]: r["total"] for r in rows})
    return ranks


def page_entries(conn: sqlite3.Connection, page_id: int) -> dict[str, IndexEntry]:
    """Return a page's postings keyed by lemma text."""
    rows = conn.execute(
        """
        SELECT e.id, e.page_id, e.lemma_id, e.rank, l.lemma
        FROM   index_entries e
        JOIN   lemmas l ON l.id = e.lemma_id
        WHERE  e.page_id = ?
        """,
        (page_id,),
    ).fetchall()
    return {
        r["lemma"]: IndexEntry(
            id=r["id"], page_id=r["page_id"], lemma_id=r["lemma_id"], rank=r["rank"]
        )
        for r in rows
    }
