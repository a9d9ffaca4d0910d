"""Operations on the ``pages`` table.

``insert_page`` and ``delete_page`` run inside the caller's transaction so
the indexing write path can replace a page and its postings atomically.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from searchengine.db.models import Page

# Keep IN (...) lists well below SQLite's host-parameter limit.
_CHUNK = 500


def _row_to_page(row: sqlite3.Row) -> Page:
    return Page(
        id=row["id"],
        site_id=row["site_id"],
        path=row["path"],
        code=row["code"],
        content=row["content"],
    )


def find_page(conn: sqlite3.Connection, site_id: int, path: str) -> Optional[Page]:
    """Fetch the page stored at ``path`` for a site, or ``None``."""
    row = conn.execute(
        "SELECT * FROM pages WHERE site_id = ? AND path = ?", (site_id, path)
    ).fetchone()
    return _row_to_page(row) if row else None


def get_pages(conn: sqlite3.Connection, page_ids: Iterable[int]) -> dict[int, Page]:
    """Return the requested pages keyed by id.  Unknown ids are ignored."""
    ids = list(page_ids)
    pages: dict[int, Page] = {}
    for start in range(0, len(ids), _CHUNK):
        chunk = ids[start : start + _CHUNK]
        placeholders = ",".join("?" for _ in chunk)
        rows = conn.execute(
            f"SELECT * FROM pages WHERE id IN ({placeholders})", chunk  # noqa: S608
        ).fetchall()
        for row in rows:
            pages[row["id"]] = _row_to_page(row)
    return pages


def list_page_ids(conn: sqlite3.Connection, site_id: Optional[int] = None) -> list[int]:
    """Return page ids in insertion order, optionally for one site."""
    if site_id is not None:
        rows = conn.execute(
            "SELECT id FROM pages WHERE site_id = ? ORDER BY id", (site_id,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT id FROM pages ORDER BY id").fetchall()
    return [r["id"] for r in rows]


def count_pages(conn: sqlite3.Connection, site_id: Optional[int] = None) -> int:
    """Count indexed pages, in total or for one site."""
    if site_id is not None:
        row = conn.execute(
            "SELECT COUNT(*) FROM pages WHERE site_id = ?", (site_id,)
        ).fetchone()
    else:
        row = conn.execute("SELECT COUNT(*) FROM pages").fetchone()
    return row[0]


def insert_page(
    conn: sqlite3.Connection,
    site_id: int,
    path: str,
    code: int,
    content: str,
) -> Page:
    """Insert a page row.  Does not commit."""
    cursor = conn.execute(
        "INSERT INTO pages (site_id, path, code, content) VALUES (?, ?, ?, ?)",
        (site_id, path, code, content),
    )
    return Page(id=cursor.lastrowid, site_id=site_id, path=path, code=code, content=content)  # type: ignore[arg-type]


def delete_page(conn: sqlite3.Connection, page_id: int) -> None:
    """Delete a page, its postings, and the lemmas only it referenced.

    Every lemma the page referenced loses one unit of document frequency;
    lemmas left at zero are removed.  Does not commit.
    """
    conn.execute(
        """
        UPDATE lemmas SET frequency = frequency - 1
        WHERE id IN (SELECT lemma_id FROM index_entries WHERE page_id = ?)
        """,
        (page_id,),
    )
    conn.execute(
        """
        DELETE FROM lemmas
        WHERE frequency <= 0
          AND site_id = (SELECT site_id FROM pages WHERE id = ?)
        """,
        (page_id,),
    )
    conn.execute("DELETE FROM pages WHERE id = ?", (page_id,))


def delete_site_pages(conn: sqlite3.Connection, site_url: str) -> int:
    """Remove every page, posting and lemma of the site with ``site_url``.

    Returns the number of pages deleted.
    """
    with conn:
        row = conn.execute("SELECT id FROM sites WHERE url = ?", (site_url,)).fetchone()
        if row is None:
            return 0
        cursor = conn.execute("DELETE FROM pages WHERE site_id = ?", (row["id"],))
        conn.execute("DELETE FROM lemmas WHERE site_id = ?", (row["id"],))
    return cursor.rowcount
