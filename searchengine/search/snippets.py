"""Snippet generation with highlighted query lemmas."""

from __future__ import annotations

import re
from typing import Iterable, Optional

HIGHLIGHT_OPEN = "<b>"
HIGHLIGHT_CLOSE = "</b>"
ELLIPSIS = "..."

# Characters of context kept before the first match in the body excerpt.
_LEAD_IN = 60


def _pattern(lemmas: Iterable[str]) -> Optional[re.Pattern[str]]:
    words = sorted({w for w in lemmas if w}, key=len, reverse=True)
    if not words:
        return None
    return re.compile("|".join(re.escape(w) for w in words), re.IGNORECASE)


def highlight(text: str, lemmas: Iterable[str]) -> str:
    """Wrap every case-insensitive occurrence of a lemma in ``<b>…</b>``."""
    pattern = _pattern(lemmas)
    if pattern is None:
        return text
    return pattern.sub(lambda m: f"{HIGHLIGHT_OPEN}{m.group(0)}{HIGHLIGHT_CLOSE}", text)


def excerpt(text: str, lemmas: Iterable[str]) -> str:
    """Return *text* starting shortly before the first lemma occurrence."""
    pattern = _pattern(lemmas)
    match = pattern.search(text) if pattern else None
    if match is None or match.start() <= _LEAD_IN:
        return text
    start = text.rfind(" ", 0, match.start() - _LEAD_IN) + 1
    return text[start:]


def build_snippet(
    title: str,
    body: str,
    lemmas: Iterable[str],
    max_length: int = 300,
) -> str:
    """Title plus body excerpt, highlighted and cut to *max_length* characters.

    The length limit applies to the visible text; highlight markers are
    added after cutting so a marker is never split.
    """
    words = list(lemmas)
    text = " ".join(part for part in (title.strip(), excerpt(body, words).strip()) if part)
    truncated = len(text) > max_length
    if truncated:
        text = text[:max_length]
    snippet = highlight(text, words)
    return snippet + ELLIPSIS if truncated else snippet
