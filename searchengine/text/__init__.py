"""Text normalization package."""

from searchengine.text.normalizer import NltkNormalizer, Normalizer, WordForm
from searchengine.text.pipeline import TextPipeline, tokenize

__all__ = ["NltkNormalizer", "Normalizer", "WordForm", "TextPipeline", "tokenize"]
