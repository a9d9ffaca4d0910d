"""Data models for the scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class FetchedPage:
    """The outcome of fetching a single URL.

    ``title``, ``text`` and ``links`` are only populated for successful HTML
    responses; redirects and error statuses carry the status code alone.
    """

    url: str
    status_code: int
    html: str = ""
    title: str = ""
    text: str = ""
    links: List[str] = field(default_factory=list)

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
