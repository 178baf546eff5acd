"""
Unit tests for the answer validator.

Covers the precedence of the grading checks and the ingredient list rule.
"""

import pytest

from menu_trainer.grading import MatchKind, validate_answer
from menu_trainer.grading.validator import (
    count_ingredient_hits,
    extract_key_words,
    split_ingredients,
)

MISO = "dashi broth, white miso, tofu, wakame, scallion"


class TestEmptyAndExact:
    @pytest.mark.parametrize("answer", ["", "   ", "\t\n"])
    def test_empty_rejected(self, answer):
        result = validate_answer(answer, "spicy mayo")

        assert result.is_correct is False
        assert result.feedback == "Please enter an answer"

    def test_exact_ignores_case_and_punctuation(self):
        result = validate_answer("  Spicy Mayo! ", "spicy mayo")

        assert result.is_correct is True
        assert result.match_kind == MatchKind.EXACT
        assert result.feedback == "Perfect! Exact match!"

    def test_exact_alternative(self):
        result = validate_answer("Green onion", "scallion", ["green onion"])

        assert result.is_correct is True
        assert result.match_kind == MatchKind.EXACT


class TestIngredientLists:
    def test_three_of_five_accepted(self):
        result = validate_answer("tofu, wakame, scallion", MISO)

        assert result.is_correct is True
        assert result.match_kind == MatchKind.PARTIAL
        assert result.feedback == "Good! You got 3 of 5 key ingredients!"

    def test_two_of_five_rejected(self):
        result = validate_answer("tofu, wakame", MISO)

        assert result.is_correct is False
        assert result.feedback == f"Not quite. The correct answer is: {MISO}"

    def test_coverage_threshold(self):
        result = validate_answer("avocado, cucumber", "eel sauce, avocado, cucumber")

        assert result.is_correct is True
        assert "2 of 3" in result.feedback

    def test_substring_segments_count(self):
        result = validate_answer("ginger, carrot", "fresh ginger, carrot, rice vinegar")

        assert result.is_correct is True

    def test_repeated_segment_counts_every_time(self):
        """Correct segments are not consumed, so repeats still score."""
        result = validate_answer("tofu, tofu, tofu", MISO)

        assert result.is_correct is True
        assert result.feedback == "Good! You got 3 of 5 key ingredients!"

    def test_stray_commas_ignored(self):
        """
        Empty segments are dropped on both sides before counting.

        An empty segment is a substring of every ingredient, so keeping it
        would let bare commas score hits and would shift the denominator.
        """
        result = validate_answer("tofu, , wakame,", "tofu, , wakame, miso")

        assert result.is_correct is True
        assert "2 of 3" in result.feedback

    def test_bare_commas_score_nothing(self):
        result = validate_answer(
            "foo, , ,", "chopped tuna, spicy mayo, cucumber, scallion, sesame"
        )

        assert result.is_correct is False


class TestFuzzyChecks:
    def test_close_match(self):
        result = validate_answer("scottish salmn", "Scottish salmon")

        assert result.is_correct is True
        assert result.match_kind == MatchKind.CLOSE
        assert result.feedback == "Close enough! Great job!"
        assert result.similarity == pytest.approx(1 - 1 / 15)

    def test_key_words_in_any_order(self):
        result = validate_answer("flakes of crispy tempura", "crispy tempura flakes")

        assert result.is_correct is True
        assert result.match_kind == MatchKind.PARTIAL
        assert result.feedback == "Good! You got all the key parts!"

    def test_single_key_word_not_enough(self):
        result = validate_answer("a lot of salmon here", "salmon")

        assert result.is_correct is False

    def test_fuzzy_alternative(self):
        result = validate_answer("green onoin", "scallion", ["green onion"])

        assert result.is_correct is True
        assert result.feedback == "Alternative answer accepted!"

    def test_wrong_answer(self):
        result = validate_answer("ketchup", "yuzu")

        assert result.is_correct is False
        assert result.match_kind == MatchKind.NONE
        assert "yuzu" in result.feedback


class TestHelpers:
    def test_split_ingredients(self):
        assert split_ingredients("Tofu, , Wakame!,") == ["tofu", "wakame"]

    def test_extract_key_words(self):
        assert extract_key_words("crispy tempura on top") == ["crispy", "tempura"]

    def test_count_hits(self):
        assert count_ingredient_hits(["tuna", "rice"], ["bigeye tuna", "nori"]) == 1
