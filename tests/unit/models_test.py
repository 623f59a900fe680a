"""Tests for lenient parsing of the input records."""

import sys
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from calm_mind_service.models.task import (
    Priority,
    StressLogEntry,
    StudentProfile,
    TaskRecord,
    TaskStatus,
    UserRecord,
)


def test_task_accepts_camel_case_payload():
    task = TaskRecord.model_validate(
        {
            "_id": 42,
            "title": "Essay",
            "priority": "high",
            "status": "In Progress",
            "startDate": "2026-10-10T08:00:00",
            "dueDate": "2026-10-14T17:00:00Z",
            "tags": "exam, writing ,",
            "assignedTo": {"_id": "u1"},
            "subtasks": [{"title": "outline", "completed": True}],
        }
    )
    assert task.id == "42"
    assert task.priority == Priority.HIGH
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.due_date == datetime(2026, 10, 14, 17, 0)
    assert task.tags == ["exam", "writing"]
    assert task.owner_id == "u1"
    assert task.subtasks[0].completed


def test_task_degrades_bad_values():
    task = TaskRecord.model_validate(
        {"priority": "urgent", "status": 7, "dueDate": "tomorrow", "completed": "yes", "title": ""}
    )
    assert task.priority is None
    assert task.status == TaskStatus.TODO
    assert task.due_date is None
    assert task.completed
    assert task.is_completed
    assert task.title == "Untitled"


def test_relevant_date_falls_back_to_start_date():
    task = TaskRecord.model_validate({"start_date": "2026-10-01"})
    assert task.relevant_date == datetime(2026, 10, 1)
    assert TaskRecord().relevant_date is None


def test_dates_use_context_timezone():
    task = TaskRecord.model_validate(
        {"dueDate": "2026-10-14T00:00:00Z"}, context={"timezone": "Asia/Manila"}
    )
    assert task.due_date == datetime(2026, 10, 14, 8, 0)


def test_unreadable_subtasks_reject_the_record():
    with pytest.raises(ValidationError):
        TaskRecord.model_validate({"title": "x", "subtasks": [5]})


def test_stress_log_levels():
    assert StressLogEntry.model_validate({"level": "4"}).level == 4.0
    assert StressLogEntry.model_validate({"level": "abc"}).level == 0.0
    assert StressLogEntry.model_validate({"level": "nan"}).level == 0.0
    log = StressLogEntry.model_validate({"ts": "2026-10-14T09:00:00", "tags": ["exam"], "userId": 7})
    assert log.timestamp == datetime(2026, 10, 14, 9, 0)
    assert log.owner_id == "7"


def test_user_and_profile_names():
    user = UserRecord.model_validate({"_id": "u1", "firstName": "Ana", "lastName": "Cruz"})
    assert user.display_name == "Ana Cruz"
    assert UserRecord.model_validate({"name": "Ben"}).display_name == "Ben"

    profile = StudentProfile.model_validate(
        {"userId": {"_id": "u1"}, "fullName": "Ana C.", "stressLevel": "3"}
    )
    assert profile.user_id == "u1"
    assert profile.display_name == "Ana C."
    assert profile.stress_level == 3.0
    assert StudentProfile.model_validate({"stressPercentage": "n/a"}).stress_percentage is None
