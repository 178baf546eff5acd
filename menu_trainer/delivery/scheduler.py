"""
Review Scheduler.

Advisory spaced repetition for menu questions:
- Selection weight from mastery tier and time since last seen
- Due check against a fixed interval per tier
- Weighted random sampling without replacement to order a round

Weights (base × recency):
    new 3, learning 4, confident 2, mastered 1
    × 2 if never seen or not seen for 7+ days
    × 1.5 if not seen for 3-6 days

Review intervals (days): new 0, learning 1, confident 3, mastered 7
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TypeVar

from loguru import logger

from menu_trainer.core.mastery import ItemStatus
from menu_trainer.core.progress import ItemProgress

from .menu_deck import Question

T = TypeVar("T")

SECONDS_PER_DAY = 86400

BASE_WEIGHTS = {
    ItemStatus.NEW: 3.0,
    ItemStatus.LEARNING: 4.0,
    ItemStatus.CONFIDENT: 2.0,
    ItemStatus.MASTERED: 1.0,
}

REVIEW_INTERVALS = {
    ItemStatus.NEW: 0,
    ItemStatus.LEARNING: 1,
    ItemStatus.CONFIDENT: 3,
    ItemStatus.MASTERED: 7,
}

STALE_DAYS = 7
STALE_MULTIPLIER = 2.0
AGING_DAYS = 3
AGING_MULTIPLIER = 1.5


# =============================================================================
# Weight & Due Check
# =============================================================================


def days_since(timestamp: datetime, now: datetime | None = None) -> int:
    """
    Whole days between a timestamp and now, rounded up.

    Args:
        timestamp: Earlier time (naive values are taken as UTC)
        now: Current time (defaults to UTC now)

    Returns:
        ceil(|now - timestamp| / 1 day)
    """
    now = now or datetime.now(UTC)

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    seconds = abs((now - timestamp).total_seconds())
    return math.ceil(seconds / SECONDS_PER_DAY)


def item_weight(
    status: ItemStatus,
    last_seen: datetime | None = None,
    now: datetime | None = None,
) -> float:
    """
    Selection weight for a question.

    Args:
        status: Mastery tier
        last_seen: When it was last answered (None = never)
        now: Current time

    Returns:
        Positive weight; higher means more likely to be picked
    """
    weight = BASE_WEIGHTS[status]

    if last_seen is None:
        return weight * STALE_MULTIPLIER

    days = days_since(last_seen, now)
    if days >= STALE_DAYS:
        weight *= STALE_MULTIPLIER
    elif days >= AGING_DAYS:
        weight *= AGING_MULTIPLIER

    return weight


def is_due(progress: ItemProgress, now: datetime | None = None) -> bool:
    """
    Check if an item should be reviewed.

    The manual needs_review flag always wins. Otherwise the least recently
    seen component decides, against the interval for the item's tier.
    """
    if progress.needs_review:
        return True

    oldest = progress.oldest_seen
    if not progress.components or oldest is None:
        return True

    return days_since(oldest, now) >= REVIEW_INTERVALS[progress.status]


# =============================================================================
# Weighted Sampling
# =============================================================================


def weighted_sample(
    candidates: Sequence[tuple[T, float]],
    count: int,
    rng: random.Random | None = None,
) -> list[T]:
    """
    Draw up to `count` candidates without replacement, biased by weight.

    Each draw picks a uniform value in [0, total) and walks the pool until
    the running total passes it; the chosen candidate leaves the pool.

    Args:
        candidates: (candidate, weight) pairs with non-negative weights
        count: Number to draw
        rng: Random source

    Returns:
        Selected candidates in draw order
    """
    rng = rng or random.Random()
    pool = list(candidates)
    selected: list[T] = []

    while len(selected) < count and pool:
        total = sum(weight for _, weight in pool)
        if total <= 0:
            break

        draw = rng.random() * total
        running = 0.0
        chosen = len(pool) - 1  # float rounding can leave the walk one short
        for index, (_, weight) in enumerate(pool):
            running += weight
            if running > draw:
                chosen = index
                break

        selected.append(pool.pop(chosen)[0])

    return selected


# =============================================================================
# Review Scheduler
# =============================================================================


@dataclass
class DueQuestion:
    """A question with its scheduling signals."""

    question: Question
    status: ItemStatus
    weight: float
    due: bool
    last_seen: datetime | None


class ReviewScheduler:
    """
    Orders questions for a round using stored progress.

    Weights are computed from each question's own classified status and
    last-seen time; questions without progress count as NEW and never seen.
    """

    def __init__(
        self,
        progress: Mapping[str, ItemProgress],
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            progress: Progress by question id
            rng: Random source (seed it for reproducible rounds)
            clock: Returns the current time (defaults to UTC now)
        """
        self.progress = progress
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(UTC))

    def describe(self, question: Question) -> DueQuestion:
        now = self.clock()
        progress = self.progress.get(question.id)

        if progress is None:
            status, last_seen, due = ItemStatus.NEW, None, True
        else:
            status, last_seen, due = progress.status, progress.last_seen, is_due(progress, now)

        return DueQuestion(
            question=question,
            status=status,
            weight=item_weight(status, last_seen, now),
            due=due,
            last_seen=last_seen,
        )

    def weigh(self, questions: Sequence[Question]) -> list[tuple[Question, float]]:
        return [(q, self.describe(q).weight) for q in questions]

    def select_next_questions(
        self,
        questions: Sequence[Question],
        count: int,
        category: str | None = None,
    ) -> list[Question]:
        """
        Pick the questions for the next round.

        Args:
            questions: Candidate pool
            count: Target round size
            category: Keep only this category

        Returns:
            Up to `count` questions in presentation order
        """
        pool = [q for q in questions if q.is_active]
        if category:
            pool = [q for q in pool if q.category == category]

        if not pool:
            logger.debug(f"No candidates for category={category!r}")
            return []

        selected = weighted_sample(self.weigh(pool), count, self.rng)
        logger.debug(f"Selected {len(selected)} of {len(pool)} candidates")
        return selected

    def due_questions(self, questions: Sequence[Question]) -> list[DueQuestion]:
        """Due questions, heaviest first."""
        described = [self.describe(q) for q in questions if q.is_active]
        due = [d for d in described if d.due]
        due.sort(key=lambda d: d.weight, reverse=True)
        return due
