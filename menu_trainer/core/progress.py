"""
Progress Updater.

Per-item progress state and the reducer that folds a new attempt into it.

An item (one description line of a menu item) has one or more components,
each graded independently. The item's status is only as good as its
weakest component.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from .mastery import AttemptRecord, ItemStatus, classify, weakest

# Rolling window of attempts kept per component
HISTORY_LIMIT = 20


@dataclass(frozen=True)
class ComponentProgress:
    """Accumulated performance for one answerable component."""

    attempts: int = 0
    correct: int = 0
    last_seen: datetime | None = None
    history: tuple[AttemptRecord, ...] = ()

    @property
    def status(self) -> ItemStatus:
        return classify(self.history)

    @property
    def accuracy(self) -> float:
        return self.correct / self.attempts if self.attempts else 0.0

    def to_dict(self) -> dict:
        return {
            "attempts": self.attempts,
            "correct": self.correct,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
            "history": [record.to_dict() for record in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ComponentProgress:
        last_seen = data.get("last_seen")
        return cls(
            attempts=int(data.get("attempts", 0)),
            correct=int(data.get("correct", 0)),
            last_seen=datetime.fromisoformat(last_seen) if last_seen else None,
            history=tuple(AttemptRecord.from_dict(r) for r in data.get("history", [])),
        )


@dataclass(frozen=True)
class ItemProgress:
    """Mastery state for one item."""

    status: ItemStatus = ItemStatus.NEW
    components: Mapping[str, ComponentProgress] = field(default_factory=dict)
    overall_accuracy: float = 0.0
    needs_review: bool = False
    bookmarked: bool = False

    @property
    def total_attempts(self) -> int:
        return sum(c.attempts for c in self.components.values())

    @property
    def total_correct(self) -> int:
        return sum(c.correct for c in self.components.values())

    @property
    def last_seen(self) -> datetime | None:
        """Most recent time any component was answered."""
        seen = [c.last_seen for c in self.components.values() if c.last_seen]
        return max(seen) if seen else None

    @property
    def oldest_seen(self) -> datetime | None:
        """Least recent last-seen time across components."""
        seen = [c.last_seen for c in self.components.values() if c.last_seen]
        return min(seen) if seen else None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "components": {cid: c.to_dict() for cid, c in self.components.items()},
            "overall_accuracy": self.overall_accuracy,
            "needs_review": self.needs_review,
            "bookmarked": self.bookmarked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ItemProgress:
        return cls(
            status=ItemStatus(data.get("status", ItemStatus.NEW.value)),
            components={
                cid: ComponentProgress.from_dict(c)
                for cid, c in (data.get("components") or {}).items()
            },
            overall_accuracy=float(data.get("overall_accuracy", 0.0)),
            needs_review=bool(data.get("needs_review", False)),
            bookmarked=bool(data.get("bookmarked", False)),
        )


def record_attempt(
    progress: ItemProgress | None,
    component_id: str,
    is_correct: bool,
    response_time_ms: int,
    now: datetime | None = None,
) -> ItemProgress:
    """
    Fold one attempt into an item's progress.

    The input is left untouched; a new ItemProgress is returned. Storing it
    back under the item's key is the caller's job.

    Args:
        progress: Current progress (None on first encounter)
        component_id: Component that was answered
        is_correct: Whether the answer was accepted
        response_time_ms: Time taken to answer
        now: Attempt time (defaults to UTC now)

    Returns:
        Updated ItemProgress
    """
    now = now or datetime.now(UTC)
    if progress is None:
        progress = ItemProgress()

    components = dict(progress.components)
    component = components.get(component_id) or ComponentProgress()

    history = (*component.history, AttemptRecord(now, is_correct, response_time_ms))
    components[component_id] = ComponentProgress(
        attempts=component.attempts + 1,
        correct=component.correct + (1 if is_correct else 0),
        last_seen=now,
        history=history[-HISTORY_LIMIT:],
    )

    total_attempts = sum(c.attempts for c in components.values())
    total_correct = sum(c.correct for c in components.values())

    return replace(
        progress,
        components=components,
        overall_accuracy=total_correct / total_attempts if total_attempts else 0.0,
        status=weakest([c.status for c in components.values()]) or ItemStatus.NEW,
    )
