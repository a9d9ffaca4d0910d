"""CRUD operations for the ``sites`` table.

Status changes follow the crawl lifecycle: a site is (re)started as
``INDEXING`` and leaves that state exactly once, for ``INDEXED`` or
``FAILED``.  :func:`finish_site` only touches rows that are still
``INDEXING`` so a late finisher never overwrites a stop.
"""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from searchengine.db.models import Site, SiteStatus


def _row_to_site(row: sqlite3.Row) -> Site:
    return Site(
        id=row["id"],
        url=row["url"],
        name=row["name"],
        status=SiteStatus(row["status"]),
        status_time=row["status_time"],
        last_error=row["last_error"],
    )


def get_site(conn: sqlite3.Connection, site_id: int) -> Optional[Site]:
    """Fetch a site by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM sites WHERE id = ?", (site_id,)).fetchone()
    return _row_to_site(row) if row else None


def find_site_by_url(conn: sqlite3.Connection, url: str) -> Optional[Site]:
    """Fetch a site by its root URL.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM sites WHERE url = ?", (url,)).fetchone()
    return _row_to_site(row) if row else None


def list_sites(
    conn: sqlite3.Connection,
    status: Optional[SiteStatus] = None,
) -> list[Site]:
    """Return all sites, optionally filtered by ``status``."""
    if status is not None:
        rows = conn.execute(
            "SELECT * FROM sites WHERE status = ? ORDER BY id", (status.value,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM sites ORDER BY id").fetchall()
    return [_row_to_site(r) for r in rows]


def create_site(conn: sqlite3.Connection, url: str, name: str) -> Site:
    """Insert a new site in the ``INDEXING`` state and return it."""
    with conn:
        cursor = conn.execute(
            """
            INSERT INTO sites (url, name, status, status_time, last_error)
            VALUES (?, ?, ?, ?, NULL)
            """,
            (url, name, SiteStatus.INDEXING.value, int(time())),
        )
    return get_site(conn, cursor.lastrowid)  # type: ignore[return-value,arg-type]


def reset_site(conn: sqlite3.Connection, site_id: int, name: str) -> Site:
    """Clear a site's pages, postings and lemmas and restart it as ``INDEXING``.

    Raises:
        ValueError: If ``site_id`` does not exist.
    """
    if get_site(conn, site_id) is None:
        raise ValueError(f"Site not found: {site_id!r}")

    with conn:
        # index_entries go with their pages via ON DELETE CASCADE
        conn.execute("DELETE FROM pages WHERE site_id = ?", (site_id,))
        conn.execute("DELETE FROM lemmas WHERE site_id = ?", (site_id,))
        conn.execute(
            """
            UPDATE sites
            SET name = ?, status = ?, status_time = ?, last_error = NULL
            WHERE id = ?
            """,
            (name, SiteStatus.INDEXING.value, int(time()), site_id),
        )
    return get_site(conn, site_id)  # type: ignore[return-value]


def touch_site(conn: sqlite3.Connection, site_id: int) -> None:
    """Refresh ``status_time`` of a site that is still being indexed."""
    with conn:
        conn.execute(
            "UPDATE sites SET status_time = ? WHERE id = ? AND status = ?",
            (int(time()), site_id, SiteStatus.INDEXING.value),
        )


def finish_site(
    conn: sqlite3.Connection,
    site_id: int,
    status: SiteStatus,
    error: Optional[str] = None,
) -> bool:
    """Move an ``INDEXING`` site to its terminal ``status``.

    Returns ``True`` if the transition happened, ``False`` if the site had
    already left the ``INDEXING`` state (for example after a user stop).
    """
    if status is SiteStatus.INDEXING:
        raise ValueError("finish_site() needs a terminal status")

    with conn:
        cursor = conn.execute(
            """
            UPDATE sites
            SET status = ?, status_time = ?, last_error = ?
            WHERE id = ? AND status = ?
            """,
            (status.value, int(time()), error, site_id, SiteStatus.INDEXING.value),
        )
    return cursor.rowcount == 1


def fail_indexing_sites(conn: sqlite3.Connection, error: str) -> list[Site]:
    """Mark every ``INDEXING`` site as ``FAILED`` and return the affected sites."""
    with conn:
        rows = conn.execute(
            "SELECT id FROM sites WHERE status = ?", (SiteStatus.INDEXING.value,)
        ).fetchall()
        ids = [r["id"] for r in rows]
        conn.executemany(
            """
            UPDATE sites
            SET status = ?, status_time = ?, last_error = ?
            WHERE id = ? AND status = ?
            """,
            [
                (SiteStatus.FAILED.value, int(time()), error, sid, SiteStatus.INDEXING.value)
                for sid in ids
            ],
        )
    return [s for s in (get_site(conn, sid) for sid in ids) if s is not None]
