"""
String Similarity Engine.

Levenshtein edit distance and the normalized similarity score used by the
answer validator, plus the text normalization shared by all grading paths.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

# Minimum similarity for fuzzy_search hits
FUZZY_SEARCH_THRESHOLD = 0.5


def normalize(text: str) -> str:
    """
    Normalize a string for comparison.

    Lowercases, trims, strips punctuation and collapses whitespace runs.

    Args:
        text: Raw text

    Returns:
        Normalized text
    """
    text = text.lower().strip()
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text)


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Similarity between two strings in [0, 1].

    Formula: 1 - distance / max(len(a), len(b))

    Two empty strings are identical (1.0).
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_length


def fuzzy_search(
    query: str,
    items: Iterable[str],
    threshold: float = FUZZY_SEARCH_THRESHOLD,
) -> list[str]:
    """
    Find items similar to a query.

    Args:
        query: Search text
        items: Candidate strings
        threshold: Minimum normalized similarity to include an item

    Returns:
        Matching items, most similar first
    """
    normalized_query = normalize(query)

    scored = [(item, similarity(normalized_query, normalize(item))) for item in items]
    hits = [(item, score) for item, score in scored if score >= threshold]
    hits.sort(key=lambda pair: pair[1], reverse=True)

    return [item for item, _ in hits]
