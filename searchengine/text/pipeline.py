"""Text pipeline: markup or plain text in, lemma frequencies out.

Used on the write path (one lemma→count map per crawled page) and on the
read path (the lemma set of a search query).
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, Optional

from searchengine.errors import NormalizationError
from searchengine.text.normalizer import NltkNormalizer, Normalizer

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_NON_ALPHABET_RE = re.compile(r"[^a-zA-Z\s]")


def tokenize(text: str) -> list[str]:
    """Strip markup and foreign characters, lowercase, split on whitespace."""
    if not text or not text.strip():
        return []
    text = _TAG_RE.sub(" ", text)
    text = _NON_ALPHABET_RE.sub(" ", text)
    return text.lower().split()


class TextPipeline:
    """Turns text into lemma counts through an injected :class:`Normalizer`."""

    def __init__(
        self,
        normalizer: Normalizer,
        stop_words: Optional[Iterable[str]] = None,
    ) -> None:
        self.normalizer = normalizer
        self.stop_words = frozenset(w.lower() for w in (stop_words or ()))

    def _lemmas(self, tokens: Iterable[str]) -> Iterable[tuple[str, str]]:
        """Yield ``(token, lemma)`` for every token that survives normalization."""
        excluded = self.normalizer.excluded_parts_of_speech
        for token in tokens:
            try:
                form = self.normalizer.normalize(token)
            except NormalizationError:
                logger.debug(f"Skipped word during lemmatization: {token!r}")
                continue
            if form.part_of_speech in excluded:
                continue
            yield token, form.lemma

    def lemma_counts(self, text: str) -> dict[str, int]:
        """Return ``{lemma: occurrences}`` for *text*.  Blank input gives ``{}``."""
        return dict(Counter(lemma for _, lemma in self._lemmas(tokenize(text))))

    def query_lemmas(self, query: str) -> set[str]:
        """Return the distinct lemmas of a search query, stop words removed."""
        return {
            lemma
            for token, lemma in self._lemmas(tokenize(query))
            if token not in self.stop_words and lemma not in self.stop_words
        }


def default_pipeline(stop_words: Optional[Iterable[str]] = None) -> TextPipeline:
    """Pipeline backed by :class:`~searchengine.text.normalizer.NltkNormalizer`."""
    return TextPipeline(NltkNormalizer(), stop_words=stop_words)
