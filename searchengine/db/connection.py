"""Connections to the index database.

Every caller gets its own connection; crawl tasks, the API and the CLI
never share one for writing.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from searchengine.config import settings

# Seconds a writer waits on a locked database before giving up.
BUSY_TIMEOUT = 30.0


def get_connection(db_path: Optional[Path | str] = None) -> sqlite3.Connection:
    """Connect to the index database with foreign keys on and WAL journaling.

    Args:
        db_path: Database file, or ``":memory:"``.  ``None`` means the
            workspace database (``settings.db_path``).

    Returns:
        A connection whose rows are :class:`sqlite3.Row`.
    """
    if db_path is None:
        settings.ensure_workspace()
        path: Path | str = settings.db_path
    else:
        path = db_path
        # Create parent directory if needed (no-op for `:memory:`)
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), timeout=BUSY_TIMEOUT, check_same_thread=False)
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")

    return conn
