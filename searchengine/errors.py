"""Exception hierarchy shared by the crawler, the index store and search."""

from __future__ import annotations


class SearchEngineError(Exception):
    """Base class for every error raised by the ``searchengine`` package."""


class FetchError(SearchEngineError):
    """A page could not be fetched (network failure, timeout, bad URL)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class NormalizationError(SearchEngineError):
    """The normalizer does not recognise a word form."""

    def __init__(self, word: str) -> None:
        super().__init__(f"Unrecognised word form: {word!r}")
        self.word = word


class StorageError(SearchEngineError):
    """A write to the index store failed."""


class SiteTraversalError(SearchEngineError):
    """A site crawl had to be abandoned."""
