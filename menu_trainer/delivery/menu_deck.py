"""
Menu Deck: Question Loader.

Loads menu items from a JSON dataset and turns every description line into
a question. The dataset is validated against a typed schema at load time;
shape mismatches raise ContentValidationError instead of leaking missing
fields into grading.

Dataset shape:
    {"menu_items": [
        {"id": "...", "name": "...", "category": "...", "status": "active",
         "description_lines": [
            {"full_text": "...", "context": "...",
             "individual_blanks": [{"answer": "...", "alternatives": ["..."]}]}
         ]}
    ]}
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from menu_trainer.core.similarity import fuzzy_search

_SLUG = re.compile(r"\W+")

# =============================================================================
# Schema
# =============================================================================


class BlankSchema(BaseModel):
    answer: str
    alternatives: list[str] = Field(default_factory=list)


class DescriptionLineSchema(BaseModel):
    full_text: str = ""
    context: str = ""
    individual_blanks: list[BlankSchema] = Field(default_factory=list)


class MenuItemSchema(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    status: Literal["active", "inactive"] = "active"
    description_lines: list[DescriptionLineSchema] = Field(default_factory=list)


class MenuDataSchema(BaseModel):
    menu_items: list[MenuItemSchema]


class CustomerQuestionSchema(BaseModel):
    item: str = Field(min_length=1)
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    category: str = Field(min_length=1)
    alternatives: list[str] = Field(default_factory=list)


class CustomerDataSchema(BaseModel):
    customer_questions: list[CustomerQuestionSchema]


class ContentLoadError(Exception):
    """Raised when the menu dataset cannot be read."""
    pass


class ContentValidationError(ContentLoadError):
    """Raised when the menu dataset does not match the schema."""
    pass


# =============================================================================
# Question Data Class
# =============================================================================


@dataclass(frozen=True)
class Blank:
    """One graded gap in a description line."""

    answer: str
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class Question:
    """
    A single description line of a menu item.

    Progress is tracked under the question id; each blank is a component.
    """

    id: str
    item_id: str
    item_name: str
    category: str
    context: str = ""
    full_text: str = ""
    blanks: tuple[Blank, ...] = ()
    status: str = "active"

    @property
    def answer(self) -> str:
        """All blank answers joined as one expected answer."""
        return ", ".join(b.answer for b in self.blanks if b.answer)

    @property
    def alternatives(self) -> list[str]:
        """Alternatives of every blank, flattened."""
        return [alt for b in self.blanks for alt in b.alternatives]

    @property
    def is_active(self) -> bool:
        return self.status != "inactive"

    @classmethod
    def from_line(cls, item: MenuItemSchema, index: int, line: DescriptionLineSchema) -> Question:
        return cls(
            id=f"{item.id}_{index}",
            item_id=item.id,
            item_name=item.name,
            category=item.category,
            context=line.context,
            full_text=line.full_text,
            blanks=tuple(
                Blank(answer=b.answer, alternatives=tuple(b.alternatives))
                for b in line.individual_blanks
            ),
            status=item.status,
        )

    @classmethod
    def from_customer_question(cls, index: int, entry: CustomerQuestionSchema) -> Question:
        """A guest's question about an item; the whole answer is one blank."""
        return cls(
            id=f"customer_{index}",
            item_id=_SLUG.sub("_", entry.item.lower()).strip("_"),
            item_name=entry.item,
            category=entry.category,
            context=entry.question,
            full_text=entry.answer,
            blanks=(Blank(answer=entry.answer, alternatives=tuple(entry.alternatives)),),
        )


def parse_menu_data(data: object, source: str = "<memory>") -> list[Question]:
    """
    Validate raw dataset content and build questions.

    Args:
        data: Decoded JSON
        source: Label used in error messages

    Returns:
        Questions for every description line, inactive items included

    Raises:
        ContentValidationError: If the data does not match the schema
    """
    try:
        menu = MenuDataSchema.model_validate(data)
    except ValidationError as e:
        raise ContentValidationError(f"Invalid menu data in {source}: {e}") from e

    seen: set[str] = set()
    questions: list[Question] = []
    for item in menu.menu_items:
        if item.id in seen:
            raise ContentValidationError(f"Duplicate menu item id in {source}: {item.id}")
        seen.add(item.id)

        for index, line in enumerate(item.description_lines):
            questions.append(Question.from_line(item, index, line))

    return questions


def parse_customer_questions(data: object, source: str = "<memory>") -> list[Question]:
    """
    Validate a customer-questions dataset and build questions.

    Raises:
        ContentValidationError: If the data does not match the schema
    """
    try:
        dataset = CustomerDataSchema.model_validate(data)
    except ValidationError as e:
        raise ContentValidationError(f"Invalid customer questions in {source}: {e}") from e

    return [
        Question.from_customer_question(index, entry)
        for index, entry in enumerate(dataset.customer_questions)
    ]


# =============================================================================
# Menu Deck
# =============================================================================


class MenuDeck:
    """
    Manages the questions built from a menu dataset.

    Features:
    - Schema validation at load
    - Inactive items skipped unless requested
    - Grouping by category
    - Fuzzy lookup by item name
    """

    parse = staticmethod(parse_menu_data)

    def __init__(self, data_path: Path, include_inactive: bool = False):
        """
        Initialize the deck.

        Args:
            data_path: JSON dataset path
            include_inactive: Keep questions from inactive items
        """
        self.data_path = data_path
        self.include_inactive = include_inactive

        self._questions: dict[str, Question] = {}  # id -> Question
        self._by_category: dict[str, list[str]] = {}  # category -> [question_ids]

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def questions(self) -> list[Question]:
        return list(self._questions.values())

    @property
    def categories(self) -> list[str]:
        return sorted(self._by_category.keys())

    def load(self) -> int:
        """
        Load and validate the dataset.

        Returns:
            Number of questions loaded

        Raises:
            ContentLoadError: If the file is missing or not JSON
            ContentValidationError: If the content does not match the schema
        """
        try:
            with open(self.data_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ContentLoadError(f"Menu data not found: {self.data_path}") from e
        except json.JSONDecodeError as e:
            raise ContentLoadError(f"Menu data is not valid JSON: {self.data_path}: {e}") from e

        return self.load_questions(self.parse(data, source=str(self.data_path)))

    def load_questions(self, questions: list[Question]) -> int:
        """Replace the deck contents with already-built questions."""
        self._questions.clear()
        self._by_category.clear()

        skipped = 0
        for question in questions:
            if not question.is_active and not self.include_inactive:
                skipped += 1
                continue

            self._questions[question.id] = question
            self._by_category.setdefault(question.category, []).append(question.id)

        logger.info(
            f"{type(self).__name__} loaded: {self.total_questions} questions in "
            f"{len(self._by_category)} categories ({skipped} inactive skipped)"
        )
        return self.total_questions

    def get(self, question_id: str) -> Question | None:
        return self._questions.get(question_id)

    def by_category(self, category: str) -> list[Question]:
        return [self._questions[qid] for qid in self._by_category.get(category, [])]

    def search(self, query: str) -> list[Question]:
        """Questions of the items whose names fuzzily match the query."""
        names = list(dict.fromkeys(q.item_name for q in self._questions.values()))
        matches = fuzzy_search(query, names)
        rank = {name: i for i, name in enumerate(matches)}

        hits = [q for q in self._questions.values() if q.item_name in rank]
        hits.sort(key=lambda q: rank[q.item_name])
        return hits

    def get_stats(self) -> dict:
        return {
            "total_questions": self.total_questions,
            "total_items": len({q.item_id for q in self._questions.values()}),
            "categories": {cat: len(ids) for cat, ids in sorted(self._by_category.items())},
        }


class CustomerQuestionDeck(MenuDeck):
    """
    Guest questions about menu items ("How big is the soup?").

    Dataset shape:
        {"customer_questions": [
            {"item": "...", "question": "...", "answer": "...",
             "category": "...", "alternatives": ["..."]}
        ]}
    """

    parse = staticmethod(parse_customer_questions)
