"""Word normalizers: map a surface word to its lemma and part of speech.

The crawler and the search engine only depend on the :class:`Normalizer`
protocol.  :class:`NltkNormalizer` is the default backend; any object with
the same two members can be injected instead.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Protocol

import nltk
from nltk.stem import WordNetLemmatizer

from searchengine.errors import NormalizationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordForm:
    lemma: str
    part_of_speech: str


class Normalizer(Protocol):
    """What the text pipeline needs from a lemmatizer."""

    excluded_parts_of_speech: frozenset[str]

    def normalize(self, word: str) -> WordForm:
        """Return the canonical form of *word*.

        Raises:
            NormalizationError: If the word form is not recognised.
        """
        ...


# ---------------------------------------------------------------------------
# NLTK backend
# ---------------------------------------------------------------------------

_WORD_RE = re.compile(r"^[a-z]+$")

# Penn Treebank tags for conjunctions, prepositions, particles, interjections.
PENN_EXCLUDED = frozenset({"CC", "IN", "RP", "UH", "TO"})

_NLTK_RESOURCES = {
    "taggers/averaged_perceptron_tagger_eng": "averaged_perceptron_tagger_eng",
    "corpora/wordnet": "wordnet",
}


def ensure_nltk_data() -> None:
    """Download the tagger and WordNet data on first use."""
    for path, package in _NLTK_RESOURCES.items():
        try:
            nltk.data.find(path)
        except LookupError:
            logger.info(f"Downloading NLTK resource {package!r}")
            nltk.download(package, quiet=True)


def _wordnet_pos(tag: str) -> str:
    if tag.startswith("J"):
        return "a"
    if tag.startswith("V"):
        return "v"
    if tag.startswith("R"):
        return "r"
    return "n"


class NltkNormalizer:
    """English normalizer built on the NLTK perceptron tagger and WordNet."""

    excluded_parts_of_speech = PENN_EXCLUDED

    def __init__(self) -> None:
        self._lemmatizer: WordNetLemmatizer | None = None
        self._lock = threading.Lock()

    def _ready(self) -> WordNetLemmatizer:
        with self._lock:
            if self._lemmatizer is None:
                ensure_nltk_data()
                self._lemmatizer = WordNetLemmatizer()
            return self._lemmatizer

    def normalize(self, word: str) -> WordForm:
        word = word.lower()
        if not _WORD_RE.match(word):
            raise NormalizationError(word)

        lemmatizer = self._ready()
        (_, tag), = nltk.pos_tag([word])
        lemma = lemmatizer.lemmatize(word, pos=_wordnet_pos(tag))
        return WordForm(lemma=lemma, part_of_speech=tag)
