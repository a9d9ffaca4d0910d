"""Search endpoint.

Routes
------
GET /api/search?query=<query>&site=<site url>&offset=0&limit=20
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from searchengine.search.engine import SearchEngine

router = APIRouter()


class SearchHitModel(BaseModel):
    site: str
    site_name: str
    uri: str
    title: str
    snippet: str
    relevance: float


class SearchResponseModel(BaseModel):
    result: bool
    error: Optional[str] = None
    count: int = 0
    data: list[SearchHitModel] = []


@router.get("/search", response_model=SearchResponseModel)
def search(
    request: Request,
    query: str = "",
    site: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(20, gt=0),
) -> dict[str, Any]:
    """Ranked search over the index, optionally restricted to one site."""
    engine = SearchEngine(request.app.state.db, request.app.state.pipeline)
    response = engine.search(query, site=site, offset=offset, limit=limit)
    return {
        "result": response.result,
        "error": response.error,
        "count": response.count,
        "data": [asdict(hit) for hit in response.data],
    }
