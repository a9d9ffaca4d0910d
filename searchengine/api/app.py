"""FastAPI application factory.

Lifespan
--------
On startup the app opens a SQLite connection for searches (shared across
requests via ``request.app.state.db``), builds the text pipeline, and
creates the :class:`~searchengine.indexing.service.IndexingService`.  On
shutdown it stops any running indexing and closes the connection.

All routes live under ``/api``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from searchengine.api.routers import indexing as indexing_router
from searchengine.api.routers import search as search_router
from searchengine.config import settings
from searchengine.db import get_connection, init_db
from searchengine.indexing.service import IndexingService
from searchengine.logging_setup import configure_logging
from searchengine.text.pipeline import default_pipeline


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB and the indexing service on startup; close on shutdown."""
    configure_logging(settings.log_level)
    conn = get_connection()
    init_db(conn)
    pipeline = default_pipeline(settings.stop_words)

    app.state.db = conn
    app.state.pipeline = pipeline
    app.state.indexing = IndexingService(pipeline, settings=settings)
    try:
        yield
    finally:
        if app.state.indexing.is_running:
            app.state.indexing.stop_indexing()
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Lemma Search API",
        description=(
            "Start and stop site indexing, re-index single pages, "
            "and run ranked lemma search over the index."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(indexing_router.router, prefix="/api", tags=["indexing"])
    app.include_router(search_router.router, prefix="/api", tags=["search"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn searchengine.api.app:app --reload
app = create_app()
