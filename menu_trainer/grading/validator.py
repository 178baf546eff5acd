"""
Answer Validator.

Decides whether a free-text answer is "correct enough" for a menu
description. Checks run in a fixed order and the first one that matches
wins:

1. Empty input
2. Exact match (answer or any alternative, after normalization)
3. Ingredient list coverage (only when the correct answer has commas)
4. Close match by overall similarity
5. Key-word coverage
6. Fuzzy match against alternatives
7. Rejection

Ingredient lists are tried before the similarity checks because their 60%
coverage threshold is looser than 80% global similarity.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from menu_trainer.core.similarity import normalize, similarity

from .base import MatchKind, ValidationResult

CLOSE_MATCH_THRESHOLD = 0.8
INGREDIENT_COVERAGE_THRESHOLD = 0.6
INGREDIENT_MIN_HITS = 3
KEY_WORD_MIN_LENGTH = 4
KEY_WORD_MIN_COUNT = 2


def extract_key_words(normalized: str) -> list[str]:
    """Words longer than three characters."""
    return [word for word in normalized.split(" ") if len(word) >= KEY_WORD_MIN_LENGTH]


def split_ingredients(text: str) -> list[str]:
    """Split a comma-separated list into normalized, non-empty segments."""
    segments = (normalize(part.strip()) for part in text.split(","))
    return [segment for segment in segments if segment]


def count_ingredient_hits(user_segments: Sequence[str], correct_segments: Sequence[str]) -> int:
    """
    Count user segments that match some correct segment.

    A segment matches on equality or when either contains the other. Correct
    segments are not consumed, so two user segments may hit the same one.
    """
    hits = 0
    for user_segment in user_segments:
        for correct_segment in correct_segments:
            if (
                user_segment == correct_segment
                or user_segment in correct_segment
                or correct_segment in user_segment
            ):
                hits += 1
                break
    return hits


def validate_answer(
    user_answer: str,
    correct_answer: str,
    alternatives: Sequence[str] = (),
) -> ValidationResult:
    """
    Grade a free-text answer.

    Args:
        user_answer: Raw text typed by the user
        correct_answer: Canonical answer
        alternatives: Other accepted phrasings

    Returns:
        ValidationResult with correctness, match kind and feedback
    """
    if not user_answer.strip():
        return ValidationResult(
            is_correct=False,
            match_kind=MatchKind.NONE,
            feedback="Please enter an answer",
        )

    normalized = normalize(user_answer)
    correct = normalize(correct_answer)
    alts = [normalize(alt) for alt in alternatives]

    if normalized == correct or normalized in alts:
        return ValidationResult(
            is_correct=True,
            match_kind=MatchKind.EXACT,
            feedback="Perfect! Exact match!",
        )

    if "," in correct_answer:
        correct_segments = split_ingredients(correct_answer)
        hits = count_ingredient_hits(split_ingredients(user_answer), correct_segments)
        total = len(correct_segments)

        if total and (hits / total >= INGREDIENT_COVERAGE_THRESHOLD or hits >= INGREDIENT_MIN_HITS):
            logger.debug(f"Ingredient list accepted: {hits}/{total} segments")
            return ValidationResult(
                is_correct=True,
                match_kind=MatchKind.PARTIAL,
                feedback=f"Good! You got {hits} of {total} key ingredients!",
            )

    score = similarity(normalized, correct)
    if score >= CLOSE_MATCH_THRESHOLD:
        return ValidationResult(
            is_correct=True,
            match_kind=MatchKind.CLOSE,
            similarity=score,
            feedback="Close enough! Great job!",
        )

    key_words = extract_key_words(correct)
    if len(key_words) >= KEY_WORD_MIN_COUNT and all(kw in normalized for kw in key_words):
        return ValidationResult(
            is_correct=True,
            match_kind=MatchKind.PARTIAL,
            feedback="Good! You got all the key parts!",
        )

    for alt in alts:
        alt_score = similarity(normalized, alt)
        if alt_score >= CLOSE_MATCH_THRESHOLD:
            return ValidationResult(
                is_correct=True,
                match_kind=MatchKind.CLOSE,
                similarity=alt_score,
                feedback="Alternative answer accepted!",
            )

    return ValidationResult(
        is_correct=False,
        match_kind=MatchKind.NONE,
        feedback=f"Not quite. The correct answer is: {correct_answer}",
    )
