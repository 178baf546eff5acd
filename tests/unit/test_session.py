"""
Unit tests for the study session controller and its timer queue.
"""

import random
import time
from datetime import UTC, datetime

import pytest

from menu_trainer.core.mastery import ItemStatus
from menu_trainer.delivery.menu_deck import parse_customer_questions
from menu_trainer.delivery.profile import update_settings
from menu_trainer.delivery.session import StudySession, TransitionQueue
from tests.conftest import NOW, make_question


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 100.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def clock():
    return FakeClock()


def make_session(store, questions, clock, mode="quick-fire", **kwargs):
    session = StudySession(
        store,
        questions,
        mode=mode,
        clock=clock,
        now=lambda: NOW,
        rng=random.Random(0),
        **kwargs,
    )
    session.start()
    return session


class TestTransitionQueue:
    def test_fires_when_due(self, clock):
        queue = TransitionQueue(clock)
        fired = []
        queue.schedule(2.0, lambda: fired.append("a"))

        assert queue.run_due() == 0
        clock.advance(2.0)
        assert queue.run_due() == 1
        assert fired == ["a"]
        assert queue.pending == []

    def test_cancelled_never_fires(self, clock):
        queue = TransitionQueue(clock)
        fired = []
        handle = queue.schedule(1.0, lambda: fired.append("a"))

        handle.cancel()
        clock.advance(5.0)
        queue.run_due()

        assert fired == []
        assert handle.pending is False


class TestSubmit:
    def test_blank_answer_not_recorded(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)

        assert session.submit("   ") is None
        assert session.submit({"answer": ""}) is None
        assert store.state.items_progress == {}
        assert session.awaiting_continue is False

    def test_correct_answer(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)

        outcome = session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        assert outcome.result.correct is True
        assert outcome.xp_gained == 12
        user = store.state.user
        assert user.xp == 12
        assert user.current_session_streak == 1
        assert user.total_questions_answered == 1
        progress = store.state.items_progress["spicy_tuna_roll_0"]
        assert progress.components["line"].attempts == 1
        assert progress.status == ItemStatus.LEARNING

    def test_measured_response_time(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        clock.advance(6.5)

        outcome = session.submit("chopped tuna, spicy mayo, cucumber")

        assert outcome.response_time_ms == 6500
        assert outcome.xp_gained == 10

    def test_wrong_answer_resets_streak(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)
        session.advance()

        outcome = session.submit("ketchup", response_time_ms=1000)

        assert outcome.result.correct is False
        assert outcome.xp_gained == 0
        assert store.state.user.current_session_streak == 0
        assert store.state.user.best_ever_streak == 1

    def test_streak_bonus(self, store, sample_questions, clock):
        questions = sample_questions[2:] * 2  # miso, ponzu, miso, ponzu
        session = make_session(store, questions, clock)

        gained = []
        for question in questions:
            gained.append(session.submit(question.answer, response_time_ms=8000).xp_gained)
            session.advance()

        assert gained == [10, 10, 10, 15]

    def test_double_submit_rejected(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("ketchup", response_time_ms=1000)

        with pytest.raises(RuntimeError):
            session.submit("ketchup", response_time_ms=1000)

    def test_fill_blank_records_every_blank(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock, mode="fill-blank")

        session.submit({"answers": ["chopped tuna", "ketchup", "cucumber"]}, response_time_ms=1000)

        progress = store.state.items_progress["spicy_tuna_roll_0"]
        assert set(progress.components) == {"blank-0", "blank-1", "blank-2"}
        assert progress.components["blank-1"].correct == 0
        assert store.state.user.total_questions_answered == 1

    def test_skip_recorded_as_wrong(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)
        session.advance()

        outcome = session.skip()

        assert outcome.skipped is True
        assert outcome.result.correct is False
        assert store.state.items_progress["dragon_roll_0"].components["line"].correct == 0
        assert store.state.user.current_session_streak == 0

    def test_first_correct_unlocks_achievement(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)

        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        assert "first_blood" in store.state.user.achievements
        assert "speed_demon" in session.unlocked


class TestAdvance:
    def test_auto_advance_after_delay(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        assert session.auto_advance_pending is True
        clock.advance(1.5)
        session.tick()
        assert session.index == 0

        clock.advance(0.5)
        session.tick()
        assert session.index == 1
        assert session.awaiting_continue is False

    def test_manual_advance_cancels_auto(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        assert session.advance() is True
        assert session.auto_advance_pending is False

        clock.advance(5.0)
        session.tick()
        assert session.index == 1

    def test_advance_is_idempotent(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("ketchup", response_time_ms=1000)

        assert session.advance() is True
        assert session.advance() is False
        assert session.index == 1

    def test_no_auto_advance_after_wrong_answer(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock)
        session.submit("ketchup", response_time_ms=1000)

        assert session.auto_advance_pending is False

    def test_auto_advance_setting_off(self, store, sample_questions, clock):
        store.transition(update_settings, auto_advance=False)
        session = make_session(store, sample_questions, clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        assert session.auto_advance_pending is False


class TestFinish:
    def test_last_advance_finishes_round(self, store, sample_questions, clock):
        session = make_session(store, sample_questions[:1], clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)

        session.advance()

        assert session.completed is True
        assert session.current is None
        stats = store.state.stats
        assert stats.sessions_completed == 1
        assert stats.mode_counts == {"quick-fire": 1}
        assert stats.strongest_category == "Sushi Rolls"
        assert store.state.user.xp == 12 + 80
        assert store.state.user.streak_days == 1

    def test_finish_is_idempotent(self, store, sample_questions, clock):
        session = make_session(store, sample_questions[:1], clock)
        session.submit("ketchup", response_time_ms=1000)

        first = session.finish()
        second = session.finish()

        assert first is second
        assert store.state.stats.sessions_completed == 1

    def test_summary(self, store, sample_questions, clock):
        session = make_session(store, sample_questions[:2], clock)
        session.submit("chopped tuna, spicy mayo, cucumber", response_time_ms=1000)
        session.advance()
        session.submit("ketchup", response_time_ms=1000)
        session.advance()

        summary = session.finish()

        assert summary.correct_answers == 1
        assert summary.total_questions == 2
        assert summary.accuracy == 0.5
        assert summary.bonus_xp == 65
        assert summary.xp_earned == 12 + 65

    def test_practice_test_saved(self, store, sample_questions, clock):
        session = make_session(store, sample_questions, clock, mode="practice-test")
        for question in sample_questions:
            if question.category == "Sushi Rolls":
                session.submit({"answers": [b.answer for b in question.blanks]}, response_time_ms=1000)
            else:
                session.skip()
            session.advance()

        tests = store.state.practice_tests
        assert len(tests) == 1
        assert tests[0].score == 50
        assert tests[0].correct_answers == 2
        assert tests[0].weak_areas == ("Sauces & Dressings", "Soups & Salads")

    def test_empty_round(self, store, clock):
        session = make_session(store, [], clock)

        assert session.completed is True
        assert session.current is None


@pytest.fixture
def eastern_time(monkeypatch):
    """Run with the process timezone set to US Eastern (UTC-4 in June)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "EST5EDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestStudyDay:
    def test_day_streak_follows_local_calendar(self, store, sample_questions, clock, eastern_time):
        # 21:00 on June 15 and 09:00 on June 16 local time: one UTC day, two local days
        evening = datetime(2024, 6, 16, 1, 0, tzinfo=UTC)
        morning = datetime(2024, 6, 16, 13, 0, tzinfo=UTC)

        for moment in (evening, morning):
            session = StudySession(store, sample_questions[:1], clock=clock, now=lambda m=moment: m)
            session.start()
            session.finish()

        assert store.state.user.streak_days == 2
        assert store.state.user.last_study_date.isoformat() == "2024-06-16"

    def test_same_local_day_counts_once(self, store, sample_questions, clock, eastern_time):
        # 08:00 and 23:30 on June 15 local time straddle UTC midnight
        early = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
        late = datetime(2024, 6, 16, 3, 30, tzinfo=UTC)

        for moment in (early, late):
            session = StudySession(store, sample_questions[:1], clock=clock, now=lambda m=moment: m)
            session.start()
            session.finish()

        assert store.state.user.streak_days == 1
        assert store.state.user.last_study_date.isoformat() == "2024-06-15"


class TestUnusableQuestions:
    def test_lines_without_blanks_left_out_of_fill_blank(self, store, sample_questions, clock):
        bare = make_question("ponzu", index=1, answers=(), full_text="Served chilled")
        session = make_session(store, [bare, *sample_questions[:1]], clock, mode="fill-blank")

        assert [q.id for q in session.questions] == ["spicy_tuna_roll_0"]
        assert session.current.id == "spicy_tuna_roll_0"

    def test_flashcard_keeps_line_with_text(self, store, clock):
        bare = make_question("ponzu", index=1, answers=(), full_text="Served chilled")
        session = make_session(store, [bare], clock, mode="flashcard")

        assert session.current is bare

    def test_round_of_only_unusable_questions_is_empty(self, store, clock):
        bare = make_question("ponzu", index=1, answers=(), full_text="Served chilled")
        session = make_session(store, [bare], clock, mode="quick-fire")

        assert session.completed is True
        assert store.state.items_progress == {}


class TestCustomerQuestions:
    @pytest.fixture
    def guest_questions(self):
        return parse_customer_questions({"customer_questions": [
            {
                "item": "Miso Soup",
                "question": "Is the miso soup vegetarian?",
                "answer": "no, the broth is made with bonito dashi",
                "category": "Soups & Salads",
                "alternatives": ["no"],
            },
            {
                "item": "Ponzu",
                "question": "What citrus is in the ponzu?",
                "answer": "yuzu",
                "category": "Sauces & Dressings",
            },
        ]})

    def test_answers_leave_item_progress_alone(self, store, guest_questions, clock):
        session = make_session(store, guest_questions, clock, mode="customer-questions")

        outcome = session.submit("No", response_time_ms=8000)

        assert outcome.result.correct is True
        assert outcome.xp_gained == 10
        user = store.state.user
        assert user.xp == 10
        assert user.current_session_streak == 1
        assert user.total_questions_answered == 0
        assert store.state.items_progress == {}

    def test_flat_completion_bonus(self, store, guest_questions, clock):
        session = make_session(store, guest_questions, clock, mode="customer-questions")
        session.submit("no", response_time_ms=8000)
        session.advance()
        session.submit("lemon", response_time_ms=8000)
        session.advance()

        summary = session.finish()

        assert summary.correct_answers == 1
        assert summary.bonus_xp == 50
        assert summary.xp_earned == 10 + 50
        assert store.state.user.xp == 60
        assert store.state.stats.sessions_completed == 1
        assert store.state.user.streak_days == 1
        assert store.state.items_progress == {}
