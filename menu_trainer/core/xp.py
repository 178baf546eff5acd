"""
XP and leveling.

Level curve: level 1 needs 100 XP to clear, each later level needs 15% more
than the previous one.
"""

from __future__ import annotations

import math
from typing import NamedTuple

BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.15

BASE_ANSWER_XP = 10
SPEED_BONUS_XP = 2
SPEED_BONUS_MS = 5000

# (min streak, bonus) - cumulative
STREAK_BONUSES = (
    (3, 5),
    (5, 5),
    (10, 10),
)

BASE_SESSION_XP = 50
SESSION_ACCURACY_XP = 30

MODE_MULTIPLIERS = {
    "quick-fire": 1.0,
    "flashcard": 0.8,
    "fill-blank": 1.2,
    "multiple-choice": 0.7,
    "practice-test": 2.0,
    "speedrun": 1.5,
}

# Modes paying a fixed completion bonus regardless of accuracy
FLAT_SESSION_XP = {
    "customer-questions": 50,
}


class LevelInfo(NamedTuple):
    level: int
    current_level_xp: int
    xp_to_next_level: int

    @property
    def progress(self) -> float:
        """Fraction of the way to the next level (0-1)."""
        if self.xp_to_next_level <= 0:
            return 0.0
        return self.current_level_xp / self.xp_to_next_level


def xp_for_level(level: int) -> int:
    """XP required to clear a level."""
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def level_from_xp(total_xp: int) -> LevelInfo:
    """
    Convert cumulative XP into a level.

    Args:
        total_xp: Lifetime XP

    Returns:
        LevelInfo(level, XP past the current level's floor, span of the next level-up)
    """
    level = 1
    current_floor = 0
    next_threshold = xp_for_level(1)

    while total_xp >= next_threshold:
        level += 1
        current_floor = next_threshold
        next_threshold += xp_for_level(level)

    return LevelInfo(
        level=level,
        current_level_xp=total_xp - current_floor,
        xp_to_next_level=next_threshold - current_floor,
    )


def reward_for_answer(is_correct: bool, current_streak: int, response_time_ms: int) -> int:
    """
    XP earned for a single answer.

    Streak bonuses stack: +5 at 3, +10 at 5, +20 at 10. Answers under five
    seconds earn +2.
    """
    if not is_correct:
        return 0

    xp = BASE_ANSWER_XP
    for min_streak, bonus in STREAK_BONUSES:
        if current_streak >= min_streak:
            xp += bonus

    if response_time_ms < SPEED_BONUS_MS:
        xp += SPEED_BONUS_XP

    return xp


def session_xp(correct_answers: int, total_questions: int, mode: str) -> int:
    """
    Completion bonus for a study round.

    Args:
        correct_answers: Correct answers in the round
        total_questions: Questions in the round
        mode: Study mode value (e.g. "fill-blank")

    Returns:
        XP bonus, scaled by the mode multiplier
    """
    if mode in FLAT_SESSION_XP:
        return FLAT_SESSION_XP[mode]

    accuracy_bonus = 0
    if total_questions > 0:
        accuracy_bonus = math.floor(correct_answers / total_questions * SESSION_ACCURACY_XP)

    multiplier = MODE_MULTIPLIERS.get(mode, 1.0)
    return math.floor((BASE_SESSION_XP + accuracy_bonus) * multiplier)
