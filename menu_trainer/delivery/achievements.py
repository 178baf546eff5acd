"""
Achievements.

A fixed catalog of badges with numeric targets. Progress towards each badge
is derived from the persisted state plus a few per-session facts the
session controller reports (fastest answer, round pace, items mastered).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from menu_trainer.core.mastery import ItemStatus
from menu_trainer.core.progress import ItemProgress

from .menu_deck import Question
from .profile import AppState


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    target: int


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_blood", "First Blood", "Answer your first question correctly", "🎯", 1),
    Achievement("hot_streak", "Hot Streak", "Get 5 correct answers in a row", "🔥", 5),
    Achievement("speed_demon", "Speed Demon", "Answer a question in under 5 seconds", "⚡", 1),
    Achievement("sushi_master", "Sushi Master", "Achieve 100% mastery in Sushi category", "🍣", 100),
    Achievement("salad_expert", "Salad Expert", "Achieve 100% mastery in Soups & Salads", "🥗", 100),
    Achievement(
        "sauce_specialist", "Sauce Specialist", "Achieve 100% mastery in Sauces & Dressings", "🧂", 100
    ),
    Achievement("menu_master", "Menu Master", "Achieve 100% mastery across all items", "📚", 100),
    Achievement("lightning_round", "Lightning Round", "Complete 20 questions in under 3 minutes", "⚡", 1),
    Achievement("week_warrior", "Week Warrior", "Maintain a 7-day study streak", "🗓️", 7),
    Achievement("dedicated", "Dedicated Scholar", "Maintain a 30-day study streak", "📖", 30),
    Achievement("perfectionist", "Perfectionist", "Score 100% on a practice test", "💯", 100),
    Achievement("scholar", "Scholar", "Answer 500 questions total", "🎓", 500),
    Achievement("legend", "Legend", "Reach Level 20", "🏅", 20),
    Achievement("century", "Century Club", "Complete 100 study sessions", "💪", 100),
    Achievement("quick_learner", "Quick Learner", "Master 10 items in a single session", "🧠", 10),
)

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENTS}

# Category keywords per mastery badge (matched against lowercased category names)
CATEGORY_BADGES = {
    "sushi_master": ("sushi",),
    "salad_expert": ("soup", "salad"),
    "sauce_specialist": ("sauce", "dressing"),
}

SPEED_DEMON_MS = 5000
LIGHTNING_QUESTIONS = 20
LIGHTNING_MS = 3 * 60 * 1000


@dataclass(frozen=True)
class SessionFacts:
    """Per-session signals that are not part of the persisted state."""

    fastest_correct_ms: int | None = None
    questions_answered: int = 0
    elapsed_ms: int = 0
    items_mastered: int = 0


def category_mastery(
    items_progress: Mapping[str, ItemProgress],
    questions: Iterable[Question],
    keywords: tuple[str, ...] | None = None,
) -> int:
    """
    Percent of questions whose progress is MASTERED.

    Args:
        items_progress: Progress by question id
        questions: Candidate questions
        keywords: Keep only categories containing one of these (None = all)

    Returns:
        Whole percent 0-100 (0 when no question matches)
    """
    selected = [
        q
        for q in questions
        if keywords is None or any(kw in q.category.lower() for kw in keywords)
    ]
    if not selected:
        return 0

    mastered = sum(
        1
        for q in selected
        if (p := items_progress.get(q.id)) is not None and p.status == ItemStatus.MASTERED
    )
    return mastered * 100 // len(selected)


def achievement_progress(
    achievement_id: str,
    state: AppState,
    questions: Iterable[Question] = (),
    facts: SessionFacts | None = None,
) -> int:
    """Current progress value towards an achievement's target."""
    user = state.user
    facts = facts or SessionFacts()

    if achievement_id == "first_blood":
        return 1 if user.best_ever_streak > 0 else 0
    if achievement_id == "hot_streak":
        return user.best_ever_streak
    if achievement_id == "speed_demon":
        fastest = facts.fastest_correct_ms
        return 1 if fastest is not None and fastest < SPEED_DEMON_MS else 0
    if achievement_id in CATEGORY_BADGES:
        return category_mastery(state.items_progress, questions, CATEGORY_BADGES[achievement_id])
    if achievement_id == "menu_master":
        return category_mastery(state.items_progress, questions)
    if achievement_id == "lightning_round":
        fast = facts.questions_answered >= LIGHTNING_QUESTIONS and facts.elapsed_ms < LIGHTNING_MS
        return 1 if fast else 0
    if achievement_id in ("week_warrior", "dedicated"):
        return user.streak_days
    if achievement_id == "perfectionist":
        return max((t.score for t in state.practice_tests), default=0)
    if achievement_id == "scholar":
        return user.total_questions_answered
    if achievement_id == "legend":
        return user.level
    if achievement_id == "century":
        return state.stats.sessions_completed
    if achievement_id == "quick_learner":
        return facts.items_mastered
    return 0


def is_achieved(achievement_id: str, current_progress: int) -> bool:
    achievement = ACHIEVEMENTS_BY_ID.get(achievement_id)
    if achievement is None:
        return False
    return current_progress >= achievement.target


def evaluate_achievements(
    state: AppState,
    questions: Iterable[Question] = (),
    facts: SessionFacts | None = None,
) -> list[str]:
    """
    Ids of achievements earned but not yet unlocked.

    Args:
        state: Current state
        questions: Deck questions (for the mastery badges)
        facts: Per-session signals

    Returns:
        Newly earned achievement ids in catalog order
    """
    questions = list(questions)
    earned = []
    for achievement in ACHIEVEMENTS:
        if achievement.id in state.user.achievements:
            continue
        progress = achievement_progress(achievement.id, state, questions, facts)
        if is_achieved(achievement.id, progress):
            earned.append(achievement.id)
    return earned
