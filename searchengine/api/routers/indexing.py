"""Indexing endpoints.

Routes
------
GET  /api/startIndexing   Start (or restart) indexing of every configured site
GET  /api/stopIndexing    Stop the running indexing
POST /api/indexPage       Body: {"url": "https://..."}  → index one page
GET  /api/status          Per-site indexing status
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from searchengine.indexing.service import IndexingService

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CommandResponse(BaseModel):
    result: bool
    error: Optional[str] = None


class IndexPageRequest(BaseModel):
    url: str


class SiteStatusResponse(BaseModel):
    url: str
    name: str
    status: str
    status_time: int
    last_error: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

def _service(request: Request) -> IndexingService:
    return request.app.state.indexing


@router.get("/startIndexing", response_model=CommandResponse)
def start_indexing(request: Request) -> dict[str, Any]:
    """Start a full indexing run; a re-index once a run has completed before."""
    service = _service(request)
    if service.has_indexed_sites():
        logger.info("Starting re-indexing")
        response = service.start_reindexing()
    else:
        logger.info("Starting full indexing")
        response = service.start_indexing()
    return asdict(response)


@router.get("/stopIndexing", response_model=CommandResponse)
def stop_indexing(request: Request) -> dict[str, Any]:
    """Stop the running indexing; sites in progress become ``FAILED``."""
    return asdict(_service(request).stop_indexing())


@router.post("/indexPage", response_model=CommandResponse)
def index_page(body: IndexPageRequest, request: Request) -> dict[str, Any]:
    """Fetch and re-index a single page of a configured site."""
    if not body.url.strip():
        return {"result": False, "error": "URL is empty"}
    return asdict(_service(request).index_page(body.url))


@router.get("/status", response_model=list[SiteStatusResponse])
def status(request: Request) -> list[dict[str, Any]]:
    """Return indexing status of every known site."""
    return [
        {
            "url": site.url,
            "name": site.name,
            "status": site.status.value,
            "status_time": site.status_time,
            "last_error": site.last_error,
        }
        for site in _service(request).site_statuses()
    ]
