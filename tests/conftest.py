"""Shared fixtures.

The NLTK-backed normalizer needs downloaded corpora, so the suite uses
:class:`DictionaryNormalizer`, a tiny deterministic stand-in that follows
the same protocol.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from searchengine.db.connection import get_connection
from searchengine.db.migrations import init_db
from searchengine.errors import NormalizationError
from searchengine.text.normalizer import WordForm
from searchengine.text.pipeline import TextPipeline

TEST_STOP_WORDS = {"the", "a", "is"}


class DictionaryNormalizer:
    """Plural nouns lose their ``s``; a few function words and unknowns are special."""

    excluded_parts_of_speech = frozenset({"CONJ", "PREP", "PART", "INTJ"})

    FUNCTION_WORDS = {
        "and": "CONJ",
        "or": "CONJ",
        "of": "PREP",
        "in": "PREP",
        "on": "PREP",
        "not": "PART",
        "oh": "INTJ",
        "the": "DET",
        "a": "DET",
        "is": "VERB",
    }
    UNKNOWN = {"xyzzy", "qwerty"}

    def normalize(self, word: str) -> WordForm:
        if word in self.UNKNOWN:
            raise NormalizationError(word)
        if word in self.FUNCTION_WORDS:
            return WordForm(lemma=word, part_of_speech=self.FUNCTION_WORDS[word])
        if len(word) > 3 and word.endswith("s") and not word.endswith("ss"):
            return WordForm(lemma=word[:-1], part_of_speech="NOUN")
        return WordForm(lemma=word, part_of_speech="NOUN")


@pytest.fixture()
def normalizer() -> DictionaryNormalizer:
    return DictionaryNormalizer()


@pytest.fixture()
def pipeline(normalizer: DictionaryNormalizer) -> TextPipeline:
    return TextPipeline(normalizer, stop_words=TEST_STOP_WORDS)


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()
