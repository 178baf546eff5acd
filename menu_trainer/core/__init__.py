"""
Core Module - Grading-independent engine pieces.

Components:
- similarity: Levenshtein distance, similarity, normalization
- mastery: Mastery tiers and the history classifier
- progress: Per-item progress state and the attempt reducer
- xp: Rewards and the level curve

Everything here is a pure function or a plain data class; persistence and
presentation live in menu_trainer.delivery.
"""

from menu_trainer.core.mastery import AttemptRecord, ItemStatus, classify
from menu_trainer.core.progress import (
    HISTORY_LIMIT,
    ComponentProgress,
    ItemProgress,
    record_attempt,
)
from menu_trainer.core.similarity import fuzzy_search, levenshtein_distance, normalize, similarity
from menu_trainer.core.xp import (
    LevelInfo,
    level_from_xp,
    reward_for_answer,
    session_xp,
    xp_for_level,
)

__all__ = [
    # Similarity
    "normalize",
    "levenshtein_distance",
    "similarity",
    "fuzzy_search",
    # Mastery
    "ItemStatus",
    "AttemptRecord",
    "classify",
    # Progress
    "HISTORY_LIMIT",
    "ComponentProgress",
    "ItemProgress",
    "record_attempt",
    # XP
    "LevelInfo",
    "xp_for_level",
    "level_from_xp",
    "reward_for_answer",
    "session_xp",
]
