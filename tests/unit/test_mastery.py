"""
Unit tests for the mastery classifier.
"""

from datetime import UTC, datetime

import pytest

from menu_trainer.core.mastery import AttemptRecord, ItemStatus, classify, weakest

T0 = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)


def history(*outcomes: bool) -> list[AttemptRecord]:
    return [AttemptRecord(T0, ok, 2000) for ok in outcomes]


class TestClassify:
    def test_no_attempts_is_new(self):
        assert classify([]) == ItemStatus.NEW

    def test_single_correct_is_learning(self):
        assert classify(history(True)) == ItemStatus.LEARNING

    def test_single_wrong_is_learning(self):
        assert classify(history(False)) == ItemStatus.LEARNING

    def test_two_correct_is_confident(self):
        assert classify(history(True, True)) == ItemStatus.CONFIDENT

    def test_three_correct_is_mastered(self):
        assert classify(history(True, True, True)) == ItemStatus.MASTERED

    def test_half_right_is_learning(self):
        assert classify(history(True, False)) == ItemStatus.LEARNING

    def test_recent_slump_blocks_mastery(self):
        """90% overall but only 3 of the last 5 right."""
        attempts = history(*([True] * 18), False, False)

        assert classify(attempts) == ItemStatus.CONFIDENT

    def test_mastered_with_one_old_miss(self):
        attempts = history(False, *([True] * 9))

        assert classify(attempts) == ItemStatus.MASTERED


class TestWeakest:
    def test_lowest_priority_wins(self):
        statuses = [ItemStatus.MASTERED, ItemStatus.LEARNING, ItemStatus.CONFIDENT]
        assert weakest(statuses) == ItemStatus.LEARNING

    def test_empty(self):
        assert weakest([]) is None

    @pytest.mark.parametrize(
        "status,priority",
        [
            (ItemStatus.NEW, 0),
            (ItemStatus.LEARNING, 1),
            (ItemStatus.CONFIDENT, 2),
            (ItemStatus.MASTERED, 3),
        ],
    )
    def test_priority(self, status, priority):
        assert status.priority == priority


class TestAttemptRecord:
    def test_serializes_timestamp_as_iso(self):
        record = AttemptRecord(T0, True, 1500)

        data = record.to_dict()

        assert data["timestamp"] == "2024-06-01T09:30:00+00:00"
        assert AttemptRecord.from_dict(data) == record
