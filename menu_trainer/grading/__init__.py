"""
Study-mode handlers for menu trainer sessions.

Each study mode has its own module with:
- present(): Display the question to the user
- get_input(): Get user's answer
- check(): Grade the answer
- hint(): Provide progressive hints

Free-text modes grade through validator.validate_answer; multiple choice
compares option indices directly.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import StudyModeHandler


class StudyMode(str, Enum):
    """Supported study modes."""
    QUICK_FIRE = "quick-fire"
    FLASHCARD = "flashcard"
    FILL_BLANK = "fill-blank"
    MULTIPLE_CHOICE = "multiple-choice"
    PRACTICE_TEST = "practice-test"
    SPEEDRUN = "speedrun"
    CUSTOMER_QUESTIONS = "customer-questions"

    @property
    def records_progress(self) -> bool:
        """Guest questions are not menu lines, so they leave item progress alone."""
        return self is not StudyMode.CUSTOMER_QUESTIONS


# Handler registry - populated by @register decorator
HANDLERS: dict[StudyMode, "StudyModeHandler"] = {}


def register(*modes: StudyMode):
    """Decorator to register a handler for one or more study modes."""
    def decorator(cls):
        handler = cls()
        for mode in modes:
            HANDLERS[mode] = handler
        return cls
    return decorator


def get_handler(mode: str | StudyMode) -> "StudyModeHandler | None":
    """Get the handler for a study mode."""
    if isinstance(mode, str):
        try:
            mode = StudyMode(mode.lower())
        except ValueError:
            return None
    return HANDLERS.get(mode)


# Import handlers to trigger registration
from . import quick_fire
from . import fill_blank
from . import multiple_choice
from . import flashcard
from . import customer_questions

from .base import AnswerResult, MatchKind, ValidationResult
from .validator import validate_answer

__all__ = [
    "StudyMode",
    "HANDLERS",
    "get_handler",
    "register",
    "AnswerResult",
    "MatchKind",
    "ValidationResult",
    "validate_answer",
]
