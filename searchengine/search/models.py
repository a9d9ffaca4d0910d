"""Search result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SearchOutcome(str, Enum):
    BLANK_QUERY = "blank_query"
    NO_VALID_TERMS = "no_valid_terms"
    SITE_NOT_FOUND = "site_not_found"
    FOUND = "found"
    EMPTY = "empty"


@dataclass
class SearchHit:
    site: str
    site_name: str
    uri: str
    title: str
    snippet: str
    relevance: float
    absolute_relevance: float


@dataclass
class SearchResponse:
    """Search answer as exposed to callers.

    ``result`` is false only for invalid requests (blank query, no usable
    terms, unknown site).  A valid query without matches is a successful
    response with ``count == 0`` and outcome ``EMPTY``.
    """

    result: bool
    outcome: SearchOutcome
    error: Optional[str] = None
    count: int = 0
    data: List[SearchHit] = field(default_factory=list)

    @classmethod
    def failure(cls, outcome: SearchOutcome, error: str) -> "SearchResponse":
        return cls(result=False, outcome=outcome, error=error)

    @classmethod
    def empty(cls) -> "SearchResponse":
        return cls(result=True, outcome=SearchOutcome.EMPTY)
