"""
Core Mastery Module.

Mastery tiers and the classifier that maps a component's attempt history
to a tier.

Tiers (lowest to highest priority):
- NEW: never attempted
- LEARNING: attempted at least once
- CONFIDENT: 70%+ accuracy over 2+ attempts
- MASTERED: 90%+ accuracy over 3+ attempts with 80%+ over the last 5
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ItemStatus(str, Enum):
    """Mastery tier for a component or menu item."""

    NEW = "new"
    LEARNING = "learning"
    CONFIDENT = "confident"
    MASTERED = "mastered"

    @property
    def priority(self) -> int:
        """Ordering used to find the weakest component (new=0 .. mastered=3)."""
        return _PRIORITY[self]

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def emoji(self) -> str:
        """Status glyph for CLI display."""
        return {
            ItemStatus.NEW: "○",
            ItemStatus.LEARNING: "◔",
            ItemStatus.CONFIDENT: "◕",
            ItemStatus.MASTERED: "●",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            ItemStatus.NEW: "dim",
            ItemStatus.LEARNING: "yellow",
            ItemStatus.CONFIDENT: "cyan",
            ItemStatus.MASTERED: "green",
        }[self]


_PRIORITY = {
    ItemStatus.NEW: 0,
    ItemStatus.LEARNING: 1,
    ItemStatus.CONFIDENT: 2,
    ItemStatus.MASTERED: 3,
}


@dataclass(frozen=True)
class AttemptRecord:
    """A single graded answer for one component."""

    timestamp: datetime
    correct: bool
    response_time_ms: int

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "correct": self.correct,
            "response_time_ms": self.response_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AttemptRecord:
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            correct=bool(data["correct"]),
            response_time_ms=int(data.get("response_time_ms", 0)),
        )


# ============================================================================
# Classifier
# ============================================================================

MASTERED_ACCURACY = 0.9
MASTERED_MIN_ATTEMPTS = 3
MASTERED_RECENT_ACCURACY = 0.8
CONFIDENT_ACCURACY = 0.7
CONFIDENT_MIN_ATTEMPTS = 2
RECENT_WINDOW = 5


def classify(history: Sequence[AttemptRecord]) -> ItemStatus:
    """
    Classify a component's attempt history into a mastery tier.

    Each tier is a hard gate checked from highest to lowest.

    Args:
        history: Attempts, oldest first

    Returns:
        ItemStatus for the history
    """
    attempts = len(history)
    if attempts == 0:
        return ItemStatus.NEW

    accuracy = sum(1 for record in history if record.correct) / attempts

    recent = history[-RECENT_WINDOW:]
    recent_accuracy = sum(1 for record in recent if record.correct) / len(recent)

    if (
        accuracy >= MASTERED_ACCURACY
        and attempts >= MASTERED_MIN_ATTEMPTS
        and recent_accuracy >= MASTERED_RECENT_ACCURACY
    ):
        return ItemStatus.MASTERED

    if accuracy >= CONFIDENT_ACCURACY and attempts >= CONFIDENT_MIN_ATTEMPTS:
        return ItemStatus.CONFIDENT

    if attempts >= 1:
        return ItemStatus.LEARNING

    return ItemStatus.NEW


def weakest(statuses: Sequence[ItemStatus]) -> ItemStatus | None:
    """Return the lowest-priority status, or None for an empty sequence."""
    if not statuses:
        return None
    return min(statuses, key=lambda status: status.priority)
