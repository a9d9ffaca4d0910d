"""Database layer package (the inverted index store).

Public re-exports so callers can write::

    from searchengine.db import get_connection, init_db
"""

from searchengine.db.connection import get_connection
from searchengine.db.migrations import init_db
from searchengine.db.models import IndexEntry, Lemma, Page, Site, SiteStatus

__all__ = [
    "get_connection",
    "init_db",
    "IndexEntry",
    "Lemma",
    "Page",
    "Site",
    "SiteStatus",
]
