"""
Unit tests for MenuDeck loading and validation.
"""

import json

import pytest

from menu_trainer.config import DEFAULT_CUSTOMER_QUESTIONS
from menu_trainer.delivery.menu_deck import (
    ContentLoadError,
    ContentValidationError,
    CustomerQuestionDeck,
    MenuDeck,
    parse_customer_questions,
    parse_menu_data,
)


def item(item_id="ponzu", **overrides):
    data = {
        "id": item_id,
        "name": item_id.title(),
        "category": "Sauces & Dressings",
        "status": "active",
        "description_lines": [
            {
                "full_text": "Citrus soy sauce with yuzu",
                "context": "Which citrus?",
                "individual_blanks": [{"answer": "yuzu", "alternatives": ["yuzu juice"]}],
            }
        ],
    }
    data.update(overrides)
    return data


def write_menu(tmp_path, items):
    path = tmp_path / "menu.json"
    path.write_text(json.dumps({"menu_items": items}), encoding="utf-8")
    return path


class TestBundledData:
    @pytest.fixture
    def deck(self, sample_data_path):
        deck = MenuDeck(sample_data_path)
        deck.load()
        return deck

    def test_loads_active_lines(self, deck):
        assert deck.total_questions == 8
        assert deck.get("seasonal_hand_roll_0") is None

    def test_include_inactive(self, sample_data_path):
        deck = MenuDeck(sample_data_path, include_inactive=True)

        assert deck.load() == 9

    def test_question_ids_and_answers(self, deck):
        question = deck.get("spicy_tuna_roll_0")

        assert question.item_name == "Spicy Tuna Roll"
        assert question.answer == "chopped bigeye tuna, spicy mayo, cucumber, scallion"
        assert "green onion" in question.alternatives
        assert deck.get("spicy_tuna_roll_1").answer == "crispy tempura flakes"

    def test_categories_sorted(self, deck):
        assert deck.categories == [
            "Sauces & Dressings",
            "Soups & Salads",
            "Sushi & Sashimi",
            "Sushi Rolls",
        ]

    def test_by_category(self, deck):
        ids = [q.id for q in deck.by_category("Sushi Rolls")]

        assert ids == ["spicy_tuna_roll_0", "spicy_tuna_roll_1", "dragon_roll_0"]

    def test_search(self, deck):
        hits = deck.search("spicy tuna")

        assert hits
        assert {q.item_name for q in hits[:2]} == {"Spicy Tuna Roll"}

    def test_stats(self, deck):
        stats = deck.get_stats()

        assert stats["total_questions"] == 8
        assert stats["total_items"] == 7
        assert stats["categories"]["Soups & Salads"] == 2


class TestCustomerQuestionDeck:
    @pytest.fixture
    def deck(self):
        deck = CustomerQuestionDeck(DEFAULT_CUSTOMER_QUESTIONS)
        deck.load()
        return deck

    def test_loads_bundled_questions(self, deck):
        assert deck.total_questions == 9
        assert [q.id for q in deck.questions[:2]] == ["customer_0", "customer_1"]

    def test_guest_question_becomes_one_blank(self, deck):
        question = deck.get("customer_3")

        assert question.item_name == "Salmon Nigiri"
        assert question.item_id == "salmon_nigiri"
        assert question.context == "Where is the salmon from?"
        assert question.answer == "Scotland"
        assert "Scottish salmon" in question.alternatives

    def test_categories_match_menu(self, deck, sample_data_path):
        menu = MenuDeck(sample_data_path)
        menu.load()

        assert set(deck.categories) <= set(menu.categories)

    def test_empty_answer_rejected(self):
        entry = {"item": "Ponzu", "question": "What citrus?", "answer": "", "category": "Sauces"}

        with pytest.raises(ContentValidationError):
            parse_customer_questions({"customer_questions": [entry]})

    def test_menu_file_is_not_customer_data(self, sample_data_path):
        with pytest.raises(ContentValidationError, match="customer questions"):
            CustomerQuestionDeck(sample_data_path).load()


class TestValidation:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ContentLoadError, match="not found"):
            MenuDeck(tmp_path / "nope.json").load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "menu.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ContentLoadError, match="not valid JSON"):
            MenuDeck(path).load()

    def test_missing_field(self, tmp_path):
        bad = item()
        del bad["name"]

        with pytest.raises(ContentValidationError):
            MenuDeck(write_menu(tmp_path, [bad])).load()

    def test_unknown_status(self):
        with pytest.raises(ContentValidationError):
            parse_menu_data({"menu_items": [item(status="archived")]})

    def test_duplicate_ids(self):
        with pytest.raises(ContentValidationError, match="Duplicate"):
            parse_menu_data({"menu_items": [item(), item()]})

    def test_not_a_menu(self):
        with pytest.raises(ContentValidationError):
            parse_menu_data([1, 2, 3])

    def test_validation_error_is_load_error(self):
        assert issubclass(ContentValidationError, ContentLoadError)

    def test_blank_defaults(self):
        questions = parse_menu_data(
            {"menu_items": [item(description_lines=[{"individual_blanks": [{"answer": "yuzu"}]}])]}
        )

        assert questions[0].blanks[0].alternatives == ()
        assert questions[0].full_text == ""
