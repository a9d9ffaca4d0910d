"""Search package."""

from searchengine.search.engine import SearchEngine
from searchengine.search.models import SearchHit, SearchOutcome, SearchResponse

__all__ = ["SearchEngine", "SearchHit", "SearchOutcome", "SearchResponse"]
