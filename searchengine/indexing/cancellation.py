"""Cooperative cancellation shared by the crawl tasks of one indexing run."""

from __future__ import annotations

import threading
from typing import Optional


class CancellationToken:
    """A one-way stop signal.

    Crawl tasks poll :attr:`cancelled` between pages and sleep through
    :meth:`wait` so a stop also cuts politeness delays short.  Nothing is
    interrupted mid-fetch.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float]) -> bool:
        """Sleep up to *timeout* seconds; return ``True`` if cancelled meanwhile."""
        return self._event.wait(timeout)
