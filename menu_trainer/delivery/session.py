"""
Study Session Controller.

Drives one round of questions in a single study mode:

    present -> submit (grade, XP, streak, record, achievements) -> advance

Auto-advance after a correct answer is a deferred transition on a
single-threaded timer queue. A manual advance cancels it; both paths end in
the same idempotent advance(), so whichever runs first wins and the other
is a no-op.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from loguru import logger

from menu_trainer.core.mastery import ItemStatus
from menu_trainer.core.xp import reward_for_answer, session_xp
from menu_trainer.grading import StudyMode, get_handler
from menu_trainer.grading.base import AnswerResult
from menu_trainer.grading.multiple_choice import MultipleChoiceHandler

from .achievements import SessionFacts, evaluate_achievements
from .menu_deck import Question
from .profile import (
    PracticeTest,
    add_xp,
    category_accuracy,
    check_daily_streak,
    end_session,
    increment_streak,
    record_answer,
    reset_session_streak,
    save_practice_test,
    unlock_achievement,
)
from .state_store import StateStore

DEFAULT_AUTO_ADVANCE_SECONDS = 2.0


# =============================================================================
# Deferred Transitions
# =============================================================================


@dataclass(eq=False)
class CancelHandle:
    """Handle to a scheduled transition."""

    due_at: float
    callback: Callable[[], Any]
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class TransitionQueue:
    """
    Single-threaded timer queue.

    Nothing runs on its own: the host calls run_due() from its event loop
    (or after sleeping) and every transition whose time has come fires in
    schedule order.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._handles: list[CancelHandle] = []

    def schedule(self, delay_seconds: float, callback: Callable[[], Any]) -> CancelHandle:
        handle = CancelHandle(due_at=self.clock() + delay_seconds, callback=callback)
        self._handles.append(handle)
        return handle

    def run_due(self) -> int:
        """Fire due transitions. Returns how many fired."""
        now = self.clock()
        due: list[CancelHandle] = []
        waiting: list[CancelHandle] = []
        for handle in self._handles:
            if handle.pending:
                (due if handle.due_at <= now else waiting).append(handle)
        self._handles = waiting

        fired = 0
        for handle in due:
            # an earlier callback may have cancelled it
            if handle.cancelled:
                continue
            handle.fired = True
            handle.callback()
            fired += 1

        return fired

    @property
    def pending(self) -> list[CancelHandle]:
        return [h for h in self._handles if h.pending]


# =============================================================================
# Session
# =============================================================================


@dataclass
class QuestionResult:
    """Outcome of one question in a round."""

    question: Question
    result: AnswerResult
    response_time_ms: int
    xp_gained: int = 0
    skipped: bool = False


@dataclass
class SessionSummary:
    mode: str
    total_questions: int
    correct_answers: int
    elapsed_ms: int
    xp_earned: int
    bonus_xp: int
    achievements: list[str] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        return self.correct_answers / self.total_questions if self.total_questions else 0.0


class StudySession:
    """
    One round of study in a single mode.

    All state changes go through the StateStore, which persists after each
    transition.
    """

    def __init__(
        self,
        store: StateStore,
        questions: Sequence[Question],
        mode: StudyMode | str = StudyMode.QUICK_FIRE,
        deck_questions: Sequence[Question] | None = None,
        auto_advance_seconds: float = DEFAULT_AUTO_ADVANCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize a session.

        Args:
            store: State host
            questions: Questions for this round, in order
            mode: Study mode
            deck_questions: Full deck (distractors, mastery badges); defaults to questions
            auto_advance_seconds: Delay before auto-advancing after a correct answer
            clock: Monotonic seconds, used for response times and the timer queue
            now: Wall clock for attempt timestamps (defaults to UTC now)
            rng: Random source for multiple choice options
        """
        self.store = store
        self.mode = StudyMode(mode)

        handler = get_handler(self.mode)
        if handler is None:
            raise ValueError(f"No handler registered for mode {self.mode.value}")
        self.handler = handler

        # Only questions the mode can grade make it into the round
        self.questions = [q for q in questions if handler.validate(q)]
        if len(self.questions) < len(questions):
            logger.debug(
                f"Dropped {len(questions) - len(self.questions)} questions "
                f"unusable in {self.mode.value}"
            )

        self.deck_questions = list(deck_questions) if deck_questions is not None else self.questions
        self.auto_advance_seconds = auto_advance_seconds
        self.clock = clock
        self.now = now or (lambda: datetime.now(UTC))
        self.rng = rng or random.Random()

        self.queue = TransitionQueue(clock)
        self.index = 0
        self.results: list[QuestionResult] = []
        self.awaiting_continue = False
        self.completed = False
        self.unlocked: list[str] = []

        self._auto_advance: CancelHandle | None = None
        self._started_at = 0.0
        self._question_started_at = 0.0
        self._fastest_correct_ms: int | None = None
        self._items_mastered: set[str] = set()
        self._xp_earned = 0
        self._summary: SessionSummary | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def current(self) -> Question | None:
        if self.completed or self.index >= len(self.questions):
            return None
        return self.questions[self.index]

    @property
    def score(self) -> int:
        return sum(1 for r in self.results if r.result.correct)

    def study_day(self) -> date:
        """The user's local calendar day, which day streaks are counted in."""
        return self.now().astimezone().date()

    def start(self) -> None:
        """Begin the round: daily streak check, fresh in-session streak."""
        self.store.transition(check_daily_streak, self.study_day())
        self.store.transition(reset_session_streak)

        self._started_at = self.clock()
        self.index = 0

        if not self.questions:
            self.finish()
            return

        self._begin_question()
        logger.info(f"Session started: {len(self.questions)} questions ({self.mode.value})")

    def _begin_question(self) -> None:
        self.awaiting_continue = False
        self._question_started_at = self.clock()

        question = self.current
        if question is not None and isinstance(self.handler, MultipleChoiceHandler):
            self.handler.prepare(question, self.deck_questions, self.rng)

    def _elapsed_ms(self, since: float) -> int:
        return int((self.clock() - since) * 1000)

    # =========================================================================
    # Answering
    # =========================================================================

    @staticmethod
    def _is_blank(answer: Any) -> bool:
        if isinstance(answer, str):
            return not answer.strip()
        if isinstance(answer, dict) and "answer" in answer and not answer.get("dont_know"):
            return not str(answer["answer"]).strip()
        return False

    def submit(self, answer: Any, response_time_ms: int | None = None) -> QuestionResult | None:
        """
        Grade and record an answer for the current question.

        Args:
            answer: Raw input for the mode's handler
            response_time_ms: Override the measured response time

        Returns:
            QuestionResult, or None if the answer was blank (nothing recorded)

        Raises:
            RuntimeError: If the current question was already answered
        """
        question = self.current
        if question is None:
            raise RuntimeError("Session is complete")
        if self.awaiting_continue:
            raise RuntimeError("Question already answered; advance first")
        if self._is_blank(answer):
            return None

        if response_time_ms is None:
            response_time_ms = self._elapsed_ms(self._question_started_at)

        result = self.handler.check(question, answer)
        return self._apply(question, result, response_time_ms)

    def skip(self) -> QuestionResult:
        """Give up on the current question; recorded as incorrect."""
        question = self.current
        if question is None:
            raise RuntimeError("Session is complete")
        if self.awaiting_continue:
            raise RuntimeError("Question already answered; advance first")

        result = self.handler.check(question, {"dont_know": True})
        return self._apply(question, result, self._elapsed_ms(self._question_started_at), skipped=True)

    def _apply(
        self,
        question: Question,
        result: AnswerResult,
        response_time_ms: int,
        skipped: bool = False,
    ) -> QuestionResult:
        xp_gained = 0
        if result.correct:
            streak = self.store.state.user.current_session_streak
            xp_gained = reward_for_answer(True, streak, response_time_ms)
            self.store.transition(increment_streak)
            self.store.transition(add_xp, xp_gained)
            self._xp_earned += xp_gained

            if self._fastest_correct_ms is None or response_time_ms < self._fastest_correct_ms:
                self._fastest_correct_ms = response_time_ms
        else:
            self.store.transition(reset_session_streak)

        if self.mode.records_progress:
            self._record_progress(question, result, response_time_ms)

        outcome = QuestionResult(
            question=question,
            result=result,
            response_time_ms=response_time_ms,
            xp_gained=xp_gained,
            skipped=skipped,
        )
        self.results.append(outcome)
        self._unlock_achievements()

        self.awaiting_continue = True
        if result.correct and self.store.state.user.settings.auto_advance:
            self._auto_advance = self.queue.schedule(self.auto_advance_seconds, self.advance)

        logger.debug(
            f"{question.id}: correct={result.correct} match={result.match_kind.value} "
            f"time={response_time_ms}ms xp=+{xp_gained}"
        )
        return outcome

    def _record_progress(self, question: Question, result: AnswerResult, response_time_ms: int) -> None:
        previous = self.store.state.items_progress.get(question.id)
        was_mastered = previous is not None and previous.status == ItemStatus.MASTERED

        attempt_time = self.now()
        for i, (component_id, ok) in enumerate(result.component_outcomes.items()):
            self.store.transition(
                record_answer,
                question.id,
                component_id,
                ok,
                response_time_ms,
                now=attempt_time,
                count_question=(i == 0),
            )

        progress = self.store.state.items_progress.get(question.id)
        if not was_mastered and progress is not None and progress.status == ItemStatus.MASTERED:
            self._items_mastered.add(question.id)

    def _facts(self) -> SessionFacts:
        return SessionFacts(
            fastest_correct_ms=self._fastest_correct_ms,
            questions_answered=len(self.results),
            elapsed_ms=self._elapsed_ms(self._started_at),
            items_mastered=len(self._items_mastered),
        )

    def _unlock_achievements(self) -> None:
        earned = evaluate_achievements(self.store.state, self.deck_questions, self._facts())
        for achievement_id in earned:
            self.store.transition(unlock_achievement, achievement_id)
            self.unlocked.append(achievement_id)

    # =========================================================================
    # Advancing
    # =========================================================================

    @property
    def auto_advance_pending(self) -> bool:
        return self._auto_advance is not None and self._auto_advance.pending

    def tick(self) -> int:
        """Run due deferred transitions (auto-advance)."""
        return self.queue.run_due()

    def advance(self) -> bool:
        """
        Move to the next question, or finish the round after the last one.

        Returns:
            False if there was nothing to advance from (already advanced)
        """
        if not self.awaiting_continue or self.completed:
            return False

        if self._auto_advance is not None:
            self._auto_advance.cancel()
            self._auto_advance = None

        self.index += 1
        if self.index >= len(self.questions):
            self.finish()
        else:
            self._begin_question()
        return True

    def finish(self) -> SessionSummary:
        """Close the round: completion XP, stats, practice test record."""
        if self._summary is not None:
            return self._summary

        self.completed = True
        self.awaiting_continue = False
        elapsed_ms = self._elapsed_ms(self._started_at)

        total = len(self.results)
        correct = self.score

        bonus = session_xp(correct, total, self.mode.value) if total else 0
        if bonus:
            self.store.transition(add_xp, bonus)

        accuracy_by_category = category_accuracy(self.store.state.items_progress, self.deck_questions)
        self.store.transition(
            end_session,
            elapsed_ms,
            self.mode.value,
            category_accuracy=accuracy_by_category,
            today=self.study_day(),
        )

        if self.mode == StudyMode.PRACTICE_TEST and total:
            weak_areas = sorted({r.question.category for r in self.results if not r.result.correct})
            self.store.transition(
                save_practice_test,
                PracticeTest(
                    date=self.now(),
                    score=round(correct / total * 100),
                    total_questions=total,
                    correct_answers=correct,
                    time_ms=elapsed_ms,
                    weak_areas=tuple(weak_areas),
                ),
            )

        self._unlock_achievements()

        self._summary = SessionSummary(
            mode=self.mode.value,
            total_questions=total,
            correct_answers=correct,
            elapsed_ms=elapsed_ms,
            xp_earned=self._xp_earned + bonus,
            bonus_xp=bonus,
            achievements=list(self.unlocked),
        )
        logger.info(
            f"Session complete: {correct}/{total} correct, +{self._summary.xp_earned} XP"
        )
        return self._summary
