"""Tests for per-task stress scoring and derived status."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from calm_mind_service.models.task import Priority, TaskRecord, TaskStatus
from calm_mind_service.services.stress_scorer import (
    ScoringProfile,
    board_status,
    deadline_factor,
    derive_status,
    display_percent,
    score_aggregate,
    score_display,
    score_task,
    scorer_for,
)

NOW = datetime(2026, 10, 14, 12, 0)


def make_task(**kwargs) -> TaskRecord:
    return TaskRecord.model_validate({"title": "Task", **kwargs})


class TestDisplayProfile:
    def test_high_priority_due_within_the_hour(self):
        task = make_task(priority="High", due_date=NOW + timedelta(hours=1))
        assert score_display(task, NOW) == pytest.approx((1.0 + 0.9 + 0.8) / 3)

    def test_completed_medium_ignores_deadline(self):
        task = make_task(priority="Medium", completed=True, due_date=NOW - timedelta(days=2))
        assert score_display(task, NOW) == pytest.approx(0.6 / 3)

    def test_low_priority_due_far_out(self):
        task = make_task(priority="Low", due_date=NOW + timedelta(days=10))
        assert score_display(task, NOW) == pytest.approx((0.3 + 0.3 + 0.8) / 3)

    def test_example_ranking(self):
        high = make_task(priority="High", due_date=NOW + timedelta(hours=1))
        medium_done = make_task(priority="Medium", status="completed")
        low = make_task(priority="Low", due_date=NOW + timedelta(days=10))
        scores = [score_display(task, NOW) for task in (high, low, medium_done)]
        assert scores == sorted(scores, reverse=True)

    def test_unknown_priority_scores_as_medium(self):
        unknown = make_task(priority="Urgent!!")
        medium = make_task(priority="medium")
        assert unknown.priority is None
        assert score_display(unknown, NOW) == pytest.approx(score_display(medium, NOW))
        assert score_display(unknown, NOW) == pytest.approx((0.6 + 0.5 + 0.8) / 3)

    def test_overdue_task_takes_maximum_factors(self):
        task = make_task(priority="Low", due_date=NOW - timedelta(hours=3))
        assert score_display(task, NOW) == pytest.approx((0.3 + 1.0 + 1.0) / 3)

    def test_in_progress_within_three_days(self):
        task = make_task(priority="High", status="in_progress", due_date=NOW + timedelta(hours=48))
        assert score_display(task, NOW) == pytest.approx((1.0 + 0.7 + 0.7) / 3)

    def test_subtasks_ease_completion_factor(self):
        task = make_task(
            priority="Medium",
            due_date=NOW + timedelta(days=5),
            subtasks=[{"title": "a", "completed": True}, {"title": "b", "completed": False}],
        )
        assert score_display(task, NOW) == pytest.approx((0.6 + 0.5 + 0.8 * 0.85) / 3)

    def test_fully_done_subtasks_cap_reduction_at_thirty_percent(self):
        task = make_task(priority="Medium", subtasks=[{"completed": True}, {"completed": True}])
        assert score_display(task, NOW) == pytest.approx((0.6 + 0.5 + 0.8 * 0.7) / 3)

    def test_deadline_tiers(self):
        hours = [(-1, 1.0), (24, 0.9), (25, 0.7), (72, 0.7), (100, 0.5), (24 * 8, 0.3)]
        for offset, expected in hours:
            task = make_task(due_date=NOW + timedelta(hours=offset))
            assert deadline_factor(task, NOW) == expected

    def test_malformed_due_date_degrades_to_default(self):
        task = make_task(priority="High", due_date="next tuesday-ish")
        assert task.due_date is None
        assert deadline_factor(task, NOW) == 0.5

    def test_display_percent(self):
        assert display_percent(0.456) == 46
        assert display_percent(1.7) == 100


class TestAggregateProfile:
    def test_overdue_high_hits_maximum(self):
        task = make_task(priority="High", due_date=NOW - timedelta(days=1))
        assert score_aggregate(task, NOW) == 3.2

    def test_completed_returns_priority_weight(self):
        task = make_task(priority="High", status="completed", due_date=NOW - timedelta(days=1))
        assert score_aggregate(task, NOW) == 3.0

    def test_due_soon_and_far(self):
        soon = make_task(priority="Medium", due_date=NOW + timedelta(hours=48))
        far = make_task(priority="Low", due_date=NOW + timedelta(days=10))
        assert score_aggregate(soon, NOW) == 2.15
        assert score_aggregate(far, NOW) == 1.1

    def test_no_due_date_uses_moderate_delta(self):
        assert score_aggregate(make_task(priority="Medium"), NOW) == 2.15

    def test_profiles_dispatch(self):
        task = make_task(priority="High", due_date=NOW + timedelta(hours=1))
        assert score_task(task, NOW, ScoringProfile.AGGREGATE) == 3.15
        assert score_task(task, NOW) == pytest.approx(0.9)
        assert scorer_for(ScoringProfile.AGGREGATE, NOW)(task) == 3.15


def test_scores_stay_within_profile_bounds():
    offsets = [None, -48, -1, 1, 30, 80, 200, 2000]
    for priority in ("High", "Medium", "Low", None):
        for status in TaskStatus:
            for offset in offsets:
                for completed in (True, False):
                    due = NOW + timedelta(hours=offset) if offset is not None else None
                    task = make_task(
                        priority=priority, status=status.value, due_date=due, completed=completed
                    )
                    assert 0.0 <= score_display(task, NOW) <= 1.0
                    assert 1.0 <= score_aggregate(task, NOW) <= 3.2


class TestDerivedStatus:
    def test_completed_flag_wins(self):
        task = make_task(status="in_progress", completed=True, due_date=NOW - timedelta(days=1))
        assert derive_status(task, NOW) == TaskStatus.COMPLETED

    def test_completed_after_due_is_done_late(self):
        task = make_task(
            status="completed",
            due_date=NOW - timedelta(days=2),
            completed_at=NOW - timedelta(days=1),
        )
        assert derive_status(task, NOW) == TaskStatus.DONE_LATE
        assert board_status(task, NOW) == TaskStatus.COMPLETED

    def test_stored_done_late(self):
        task = make_task(status="Done Late")
        assert derive_status(task, NOW) == TaskStatus.DONE_LATE

    def test_overdue_open_task_is_missing(self):
        task = make_task(status="in_progress", due_date=NOW - timedelta(minutes=1))
        assert derive_status(task, NOW) == TaskStatus.MISSING

    def test_open_statuses(self):
        assert derive_status(make_task(status="in_progress"), NOW) == TaskStatus.IN_PROGRESS
        assert derive_status(make_task(status="missing"), NOW) == TaskStatus.MISSING
        assert derive_status(make_task(status="weird"), NOW) == TaskStatus.TODO
        assert derive_status(make_task(), NOW) == TaskStatus.TODO

    def test_priority_parse(self):
        assert Priority.parse(" HIGH ") == Priority.HIGH
        assert Priority.parse(3) is None
