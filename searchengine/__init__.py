"""Lemma-indexed site search engine: crawler, inverted index and ranked search."""

__version__ = "0.1.0"
