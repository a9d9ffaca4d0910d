"""Tests for tokenization, lemma counting and query lemmas.

The pipeline runs on the dictionary normalizer from ``conftest``.
:class:`NltkNormalizer` is checked on its input validation, and on real
lemmas where the NLTK tagger and WordNet data can be downloaded.
"""

from __future__ import annotations

import logging

import nltk
import pytest

from searchengine.errors import NormalizationError
from searchengine.text.normalizer import PENN_EXCLUDED, NltkNormalizer, ensure_nltk_data
from searchengine.text.pipeline import TextPipeline, tokenize


# ---------------------------------------------------------------------------
# tokenize
# ---------------------------------------------------------------------------

class TestTokenize:
    def test_strips_markup_and_lowercases(self) -> None:
        assert tokenize("<p>Hello, <b>World</b>!</p>") == ["hello", "world"]

    def test_foreign_characters_split_words(self) -> None:
        assert tokenize("abc123def rock'n'roll") == ["abc", "def", "rock", "n", "roll"]

    def test_blank_input(self) -> None:
        assert tokenize("") == []
        assert tokenize("   \n\t") == []
        assert tokenize("123 !!! 456") == []


# ---------------------------------------------------------------------------
# lemma_counts
# ---------------------------------------------------------------------------

class TestLemmaCounts:
    def test_counts_lemmas(self, pipeline: TextPipeline) -> None:
        assert pipeline.lemma_counts("Cats chase dogs. Cats sleep!") == {
            "cat": 2,
            "chase": 1,
            "dog": 1,
            "sleep": 1,
        }

    def test_excluded_parts_of_speech_are_dropped(self, pipeline: TextPipeline) -> None:
        counts = pipeline.lemma_counts("oh cats and dogs of the city")
        assert "and" not in counts
        assert "of" not in counts
        assert "oh" not in counts
        assert counts["cat"] == 1

    def test_stop_words_still_counted_on_pages(self, pipeline: TextPipeline) -> None:
        assert pipeline.lemma_counts("the cat")["the"] == 1

    def test_unknown_words_are_skipped(
        self, pipeline: TextPipeline, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="searchengine.text.pipeline"):
            counts = pipeline.lemma_counts("xyzzy cat qwerty")
        assert counts == {"cat": 1}
        assert "xyzzy" in caplog.text

    def test_markup_is_not_indexed(self, pipeline: TextPipeline) -> None:
        counts = pipeline.lemma_counts('<div class="header">cat</div>')
        assert counts == {"cat": 1}

    def test_blank_text(self, pipeline: TextPipeline) -> None:
        assert pipeline.lemma_counts("") == {}
        assert pipeline.lemma_counts("  42  ") == {}


# ---------------------------------------------------------------------------
# query_lemmas
# ---------------------------------------------------------------------------

class TestQueryLemmas:
    def test_distinct_lemmas(self, pipeline: TextPipeline) -> None:
        assert pipeline.query_lemmas("cats cat CATS dogs") == {"cat", "dog"}

    def test_stop_words_removed(self, pipeline: TextPipeline) -> None:
        assert pipeline.query_lemmas("the cat is a pet") == {"cat", "pet"}

    def test_only_stop_words(self, pipeline: TextPipeline) -> None:
        assert pipeline.query_lemmas("the a is") == set()

    def test_stop_word_matched_on_lemma(self, normalizer) -> None:
        pipeline = TextPipeline(normalizer, stop_words={"dog"})
        assert pipeline.query_lemmas("dogs cats") == {"cat"}

    def test_only_unrecognised_words(self, pipeline: TextPipeline) -> None:
        assert pipeline.query_lemmas("xyzzy qwerty") == set()


# ---------------------------------------------------------------------------
# NltkNormalizer
# ---------------------------------------------------------------------------

class TestNltkNormalizer:
    def test_excludes_function_word_tags(self) -> None:
        assert NltkNormalizer.excluded_parts_of_speech == PENN_EXCLUDED
        assert {"CC", "IN", "RP", "UH", "TO"} <= PENN_EXCLUDED

    @pytest.mark.parametrize("word", ["", "abc1", "naïve", "hello-world"])
    def test_rejects_non_alphabetic_words(self, word: str) -> None:
        with pytest.raises(NormalizationError):
            NltkNormalizer().normalize(word)


class TestNltkLemmatization:
    """Runs the real tagger and WordNet; skipped where the NLTK data cannot be fetched."""

    @pytest.fixture(scope="class")
    def nltk_normalizer(self) -> NltkNormalizer:
        ensure_nltk_data()
        for resource in ("taggers/averaged_perceptron_tagger_eng", "corpora/wordnet"):
            try:
                nltk.data.find(resource)
            except LookupError:
                pytest.skip(f"NLTK resource {resource} is not available")
        return NltkNormalizer()

    @pytest.mark.parametrize("word,lemma", [("cats", "cat"), ("Dogs", "dog"), ("cat", "cat")])
    def test_plural_nouns_reduced(self, nltk_normalizer, word: str, lemma: str) -> None:
        assert nltk_normalizer.normalize(word).lemma == lemma

    def test_conjunction_is_excluded(self, nltk_normalizer) -> None:
        form = nltk_normalizer.normalize("and")
        assert form.part_of_speech == "CC"
        assert form.part_of_speech in PENN_EXCLUDED

    def test_pipeline_counts_lemmas(self, nltk_normalizer) -> None:
        pipeline = TextPipeline(nltk_normalizer)
        assert pipeline.lemma_counts("Cats and cats") == {"cat": 2}
