"""
Application State and Reducers.

The whole persisted state (profile, per-item progress, practice tests and
stats) is one AppState value. Every change goes through a reducer that takes
the current state and returns a new one; the StateStore applies reducers and
writes the result through.

Reducers:
- add_xp / increment_streak / reset_session_streak
- record_answer (wraps core.progress.record_attempt)
- check_daily_streak / end_session
- update_settings / unlock_achievement / save_practice_test
- toggle_bookmark / mark_needs_review / reset_progress
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from loguru import logger

from menu_trainer.core.progress import ItemProgress, record_attempt
from menu_trainer.core.xp import level_from_xp, xp_for_level

if TYPE_CHECKING:
    from .menu_deck import Question

HINT_LEVELS = ("none", "low", "medium", "high")


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class UserSettings:
    """Feature toggles."""

    dark_mode: bool = True
    sound_effects: bool = False
    auto_advance: bool = True
    timer_enabled: bool = False
    hint_level: str = "medium"

    def to_dict(self) -> dict:
        return {
            "dark_mode": self.dark_mode,
            "sound_effects": self.sound_effects,
            "auto_advance": self.auto_advance,
            "timer_enabled": self.timer_enabled,
            "hint_level": self.hint_level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> UserSettings:
        defaults = cls()
        return cls(
            dark_mode=bool(data.get("dark_mode", defaults.dark_mode)),
            sound_effects=bool(data.get("sound_effects", defaults.sound_effects)),
            auto_advance=bool(data.get("auto_advance", defaults.auto_advance)),
            timer_enabled=bool(data.get("timer_enabled", defaults.timer_enabled)),
            hint_level=data.get("hint_level", defaults.hint_level),
        )


@dataclass(frozen=True)
class UserProfile:
    """Level, XP and streak counters."""

    level: int = 1
    xp: int = 0
    xp_to_next_level: int = field(default_factory=lambda: xp_for_level(1))
    streak_days: int = 0
    last_study_date: date | None = None
    current_session_streak: int = 0
    best_ever_streak: int = 0
    total_questions_answered: int = 0
    achievements: tuple[str, ...] = ()
    settings: UserSettings = field(default_factory=UserSettings)

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "xp": self.xp,
            "xp_to_next_level": self.xp_to_next_level,
            "streak_days": self.streak_days,
            "last_study_date": self.last_study_date.isoformat() if self.last_study_date else None,
            "current_session_streak": self.current_session_streak,
            "best_ever_streak": self.best_ever_streak,
            "total_questions_answered": self.total_questions_answered,
            "achievements": list(self.achievements),
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> UserProfile:
        last_study = data.get("last_study_date")
        return cls(
            level=int(data.get("level", 1)),
            xp=int(data.get("xp", 0)),
            xp_to_next_level=int(data.get("xp_to_next_level", xp_for_level(1))),
            streak_days=int(data.get("streak_days", 0)),
            last_study_date=date.fromisoformat(last_study) if last_study else None,
            current_session_streak=int(data.get("current_session_streak", 0)),
            best_ever_streak=int(data.get("best_ever_streak", 0)),
            total_questions_answered=int(data.get("total_questions_answered", 0)),
            achievements=tuple(dict.fromkeys(data.get("achievements", []))),
            settings=UserSettings.from_dict(data.get("settings") or {}),
        )


@dataclass(frozen=True)
class UserStats:
    """Aggregate session statistics."""

    total_study_time_ms: int = 0
    sessions_completed: int = 0
    average_session_time_ms: int = 0
    favorite_mode: str = "quick-fire"
    strongest_category: str = ""
    weakest_category: str = ""
    mode_counts: Mapping[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_study_time_ms": self.total_study_time_ms,
            "sessions_completed": self.sessions_completed,
            "average_session_time_ms": self.average_session_time_ms,
            "favorite_mode": self.favorite_mode,
            "strongest_category": self.strongest_category,
            "weakest_category": self.weakest_category,
            "mode_counts": dict(self.mode_counts),
        }

    @classmethod
    def from_dict(cls, data: dict) -> UserStats:
        return cls(
            total_study_time_ms=int(data.get("total_study_time_ms", 0)),
            sessions_completed=int(data.get("sessions_completed", 0)),
            average_session_time_ms=int(data.get("average_session_time_ms", 0)),
            favorite_mode=data.get("favorite_mode", "quick-fire"),
            strongest_category=data.get("strongest_category", ""),
            weakest_category=data.get("weakest_category", ""),
            mode_counts=dict(data.get("mode_counts") or {}),
        )


@dataclass(frozen=True)
class PracticeTest:
    """Result of one practice test."""

    date: datetime
    score: int  # percent
    total_questions: int
    correct_answers: int
    time_ms: int
    weak_areas: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "score": self.score,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "time_ms": self.time_ms,
            "weak_areas": list(self.weak_areas),
        }

    @classmethod
    def from_dict(cls, data: dict) -> PracticeTest:
        return cls(
            date=datetime.fromisoformat(data["date"]),
            score=int(data["score"]),
            total_questions=int(data["total_questions"]),
            correct_answers=int(data["correct_answers"]),
            time_ms=int(data.get("time_ms", 0)),
            weak_areas=tuple(data.get("weak_areas", [])),
        )


@dataclass(frozen=True)
class AppState:
    """Everything that is persisted between runs."""

    user: UserProfile = field(default_factory=UserProfile)
    items_progress: Mapping[str, ItemProgress] = field(default_factory=dict)
    practice_tests: tuple[PracticeTest, ...] = ()
    stats: UserStats = field(default_factory=UserStats)

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "items_progress": {k: v.to_dict() for k, v in self.items_progress.items()},
            "practice_tests": [t.to_dict() for t in self.practice_tests],
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> AppState:
        return cls(
            user=UserProfile.from_dict(data.get("user") or {}),
            items_progress={
                k: ItemProgress.from_dict(v) for k, v in (data.get("items_progress") or {}).items()
            },
            practice_tests=tuple(PracticeTest.from_dict(t) for t in data.get("practice_tests", [])),
            stats=UserStats.from_dict(data.get("stats") or {}),
        )


# =============================================================================
# Profile Reducers
# =============================================================================


def add_xp(state: AppState, amount: int) -> AppState:
    """Add XP and recompute the level."""
    new_xp = state.user.xp + amount
    info = level_from_xp(new_xp)

    if info.level > state.user.level:
        logger.info(f"Level up: {state.user.level} -> {info.level}")

    return replace(
        state,
        user=replace(
            state.user,
            xp=new_xp,
            level=info.level,
            xp_to_next_level=info.xp_to_next_level,
        ),
    )


def increment_streak(state: AppState) -> AppState:
    new_streak = state.user.current_session_streak + 1
    return replace(
        state,
        user=replace(
            state.user,
            current_session_streak=new_streak,
            best_ever_streak=max(new_streak, state.user.best_ever_streak),
        ),
    )


def reset_session_streak(state: AppState) -> AppState:
    return replace(state, user=replace(state.user, current_session_streak=0))


def record_answer(
    state: AppState,
    item_id: str,
    component_id: str,
    is_correct: bool,
    response_time_ms: int,
    now: datetime | None = None,
    count_question: bool = True,
) -> AppState:
    """
    Record one graded component of a question.

    Args:
        state: Current state
        item_id: Progress key (question id)
        component_id: Component within the item
        is_correct: Whether the component was answered correctly
        response_time_ms: Time taken to answer
        now: Attempt time (defaults to UTC now)
        count_question: Bump the lifetime question counter (once per question)

    Returns:
        New state
    """
    updated = record_attempt(
        state.items_progress.get(item_id), component_id, is_correct, response_time_ms, now
    )

    user = state.user
    if count_question:
        user = replace(user, total_questions_answered=user.total_questions_answered + 1)

    return replace(
        state,
        items_progress={**state.items_progress, item_id: updated},
        user=user,
    )


def check_daily_streak(state: AppState, today: date | None = None) -> AppState:
    """
    Advance the day streak once per calendar day.

    - First study ever: streak 1
    - Already studied today: unchanged
    - Studied yesterday: streak + 1
    - Otherwise: streak broken, back to 1
    """
    today = today or date.today()
    last = state.user.last_study_date

    if last == today:
        return state

    if last is not None and last == today - timedelta(days=1):
        streak = state.user.streak_days + 1
    else:
        streak = 1

    return replace(state, user=replace(state.user, streak_days=streak, last_study_date=today))


def end_session(
    state: AppState,
    duration_ms: int,
    mode: str,
    category_accuracy: Mapping[str, float] | None = None,
    today: date | None = None,
) -> AppState:
    """
    Fold a finished session into the stats.

    Args:
        state: Current state
        duration_ms: Session length
        mode: Study mode value
        category_accuracy: Accuracy per category, used for strongest/weakest
        today: Local calendar day of the session (defaults to today)

    Returns:
        New state
    """
    today = today or date.today()
    stats = state.stats

    total_time = stats.total_study_time_ms + duration_ms
    sessions = stats.sessions_completed + 1
    mode_counts = {**stats.mode_counts, mode: stats.mode_counts.get(mode, 0) + 1}

    strongest, weakest = stats.strongest_category, stats.weakest_category
    if category_accuracy:
        ranked = sorted(category_accuracy.items(), key=lambda pair: (pair[1], pair[0]))
        weakest, strongest = ranked[0][0], ranked[-1][0]

    return replace(
        state,
        user=replace(state.user, last_study_date=today),
        stats=replace(
            stats,
            total_study_time_ms=total_time,
            sessions_completed=sessions,
            average_session_time_ms=total_time // sessions,
            favorite_mode=max(mode_counts, key=lambda m: mode_counts[m]),
            strongest_category=strongest,
            weakest_category=weakest,
            mode_counts=mode_counts,
        ),
    )


def update_settings(state: AppState, **changes) -> AppState:
    """
    Change one or more settings.

    Raises:
        ValueError: Unknown setting or invalid hint level
    """
    unknown = set(changes) - set(UserSettings.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    if "hint_level" in changes and changes["hint_level"] not in HINT_LEVELS:
        raise ValueError(f"hint_level must be one of {HINT_LEVELS}")

    return replace(
        state,
        user=replace(state.user, settings=replace(state.user.settings, **changes)),
    )


def unlock_achievement(state: AppState, achievement_id: str) -> AppState:
    if achievement_id in state.user.achievements:
        return state

    logger.info(f"Achievement unlocked: {achievement_id}")
    return replace(
        state,
        user=replace(state.user, achievements=(*state.user.achievements, achievement_id)),
    )


def save_practice_test(state: AppState, test: PracticeTest) -> AppState:
    return replace(state, practice_tests=(*state.practice_tests, test))


def toggle_bookmark(state: AppState, item_id: str) -> AppState:
    progress = state.items_progress.get(item_id) or ItemProgress()
    updated = replace(progress, bookmarked=not progress.bookmarked)
    return replace(state, items_progress={**state.items_progress, item_id: updated})


def mark_needs_review(state: AppState, item_id: str, needs_review: bool = True) -> AppState:
    """Set the manual review override for an item."""
    progress = state.items_progress.get(item_id) or ItemProgress()
    updated = replace(progress, needs_review=needs_review)
    return replace(state, items_progress={**state.items_progress, item_id: updated})


def reset_progress(state: AppState | None = None) -> AppState:
    """Fresh default state."""
    return AppState()


# =============================================================================
# Derived Stats
# =============================================================================


def category_accuracy(
    items_progress: Mapping[str, ItemProgress],
    questions: Iterable[Question],
) -> dict[str, float]:
    """
    Accuracy per category over the questions that have been attempted.

    Categories with no attempts are left out.
    """
    attempts: dict[str, int] = {}
    correct: dict[str, int] = {}

    for question in questions:
        progress = items_progress.get(question.id)
        if progress is None or progress.total_attempts == 0:
            continue
        attempts[question.category] = attempts.get(question.category, 0) + progress.total_attempts
        correct[question.category] = correct.get(question.category, 0) + progress.total_correct

    return {cat: correct[cat] / attempts[cat] for cat in attempts}
