"""Schema creation and versioned upgrades of the index database.

``init_db`` applies ``schema.sql`` and then every entry of
:data:`MIGRATIONS` not yet recorded in ``schema_version``.  Both steps are
safe to repeat.
"""

from __future__ import annotations

import logging
import sqlite3

from searchengine.config import settings

logger = logging.getLogger(__name__)

# (version, statement) pairs, strictly increasing.
MIGRATIONS: tuple[tuple[int, str], ...] = (
    # list_sites(status=...) and the stop path filter on status
    (1, "CREATE INDEX IF NOT EXISTS idx_sites_status ON sites(status)"),
)


def init_db(conn: sqlite3.Connection) -> None:
    """Create the tables, then bring the schema to the latest version."""
    conn.executescript(settings.schema_path.read_text(encoding="utf-8"))
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER PRIMARY KEY,
                applied_at INTEGER NOT NULL DEFAULT (strftime('%s', 'now'))
            )
            """
        )
    migrate(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Highest recorded schema version; 0 before any migration ran."""
    (version,) = conn.execute(
        "SELECT IFNULL(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return version


def migrate(conn: sqlite3.Connection) -> int:
    """Apply pending migrations, each in its own transaction.

    Returns the schema version reached.
    """
    version = current_version(conn)
    for target, statement in MIGRATIONS:
        if target <= version:
            continue
        with conn:
            conn.execute(statement)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (target,))
        logger.info(f"Index database migrated to schema version {target}")
        version = target
    return version
