"""
Menu Trainer: study delivery.

Components:
- MenuDeck: JSON loading and question building (CustomerQuestionDeck for guest questions)
- ReviewScheduler: Weighted spaced repetition selection
- StateStore: SQLite persistence of the application state
- StudySession: One round of questions in a study mode
- Achievements: Badge catalog and unlock rules
- CLI: Main terminal interface
"""

from .achievements import ACHIEVEMENTS, Achievement, SessionFacts, evaluate_achievements
from .menu_deck import ContentLoadError, ContentValidationError, CustomerQuestionDeck, MenuDeck, Question
from .profile import AppState, PracticeTest, UserProfile, UserSettings, UserStats
from .scheduler import DueQuestion, ReviewScheduler, item_weight, is_due, weighted_sample
from .session import StudySession, TransitionQueue
from .state_store import StateStore

__all__ = [
    # Content
    "MenuDeck",
    "CustomerQuestionDeck",
    "Question",
    "ContentLoadError",
    "ContentValidationError",
    # State
    "AppState",
    "UserProfile",
    "UserSettings",
    "UserStats",
    "PracticeTest",
    "StateStore",
    # Scheduling
    "ReviewScheduler",
    "DueQuestion",
    "item_weight",
    "is_due",
    "weighted_sample",
    # Sessions
    "StudySession",
    "TransitionQueue",
    # Achievements
    "ACHIEVEMENTS",
    "Achievement",
    "SessionFacts",
    "evaluate_achievements",
]
