"""
Base protocol and types for study-mode handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from rich.console import Console

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question


class MatchKind(str, Enum):
    """How an answer was accepted, or NONE if rejected."""

    EXACT = "exact"
    CLOSE = "close"
    PARTIAL = "partial"
    NONE = "none"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of grading one free-text answer."""

    is_correct: bool
    match_kind: MatchKind
    feedback: str
    similarity: float | None = None


# Component id used when a whole description line is graded as one answer
LINE_COMPONENT = "line"


def blank_component(index: int) -> str:
    """Component id for an individual blank."""
    return f"blank-{index}"


@dataclass
class AnswerResult:
    """Result of checking an answer in a study mode."""

    correct: bool
    feedback: str
    user_answer: str
    correct_answer: str
    partial_score: float = 1.0  # 0.0-1.0 for partial credit
    match_kind: MatchKind = MatchKind.NONE
    similarity: float | None = None
    # component id -> correct, recorded into progress one by one
    component_outcomes: dict[str, bool] = field(default_factory=dict)
    dont_know: bool = False  # True if user selected "I don't know"


# Constants for special inputs
DONT_KNOW_INPUTS = {"?", "idk", "dk", "don't know", "dont know"}


def is_dont_know(user_input: str) -> bool:
    """Check if input indicates 'I don't know'."""
    return user_input.strip().lower() in DONT_KNOW_INPUTS


def letter_hint(answer: str, attempt: int) -> str | None:
    """Progressive hint revealing the shape of an answer."""
    if not answer:
        return None

    if attempt == 1:
        return f"Starts with: {answer[0]}..."
    elif attempt == 2:
        return f"The answer has {len(answer)} characters"
    elif attempt == 3 and len(answer) > 2:
        return f"Starts with '{answer[0]}', ends with '{answer[-1]}'"

    return None


class StudyModeHandler(Protocol):
    """Protocol for study-mode handlers."""

    def validate(self, question: Question) -> bool:
        """Check if the question has what this mode needs. Returns True if usable."""
        ...

    def present(self, question: Question, console: Console) -> None:
        """Display the question to the user."""
        ...

    def get_input(self, question: Question, console: Console) -> Any:
        """Get user's answer. Returns the raw input."""
        ...

    def check(self, question: Question, answer: Any) -> AnswerResult:
        """Grade the answer and return result."""
        ...

    def hint(self, question: Question, attempt: int) -> str | None:
        """Get progressive hint for attempt N. Returns None if no hint available."""
        ...
