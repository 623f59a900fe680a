"""
Input records supplied by the task/persistence layer.

These models are deliberately lenient: they accept the camelCase and
snake_case spellings the front end and database emit, and they degrade
malformed values (bad dates, unknown priorities) instead of rejecting the
whole record.
"""
import math
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, final

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

from ..utils.dates import parse_instant, resolve_timezone
from .registry import register_base_model_class


################################################################################################################
################################################################################################################
################################################################################################################


@final
class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: Any) -> Optional["Priority"]:
        if isinstance(value, Priority):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


@final
class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    MISSING = "missing"
    COMPLETED = "completed"
    DONE_LATE = "done_late"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        if isinstance(value, TaskStatus):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_").replace("-", "_")
            for member in cls:
                if member.value == key:
                    return member
        return cls.TODO


def _parse_date_field(value: Any, info: ValidationInfo) -> Optional[datetime]:
    context = info.context or {}
    tz = resolve_timezone(context["timezone"]) if context.get("timezone") else None
    return parse_instant(value, tz)


def _parse_tags(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set)):
        return []
    return [str(tag).strip() for tag in value if tag is not None and str(tag).strip()]


def _parse_identifier(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        # populated references arrive as {"_id": ...}
        return _parse_identifier(value.get("_id") or value.get("id"))
    return str(value)


################################################################################################################
################################################################################################################
################################################################################################################


@final
@register_base_model_class
class Subtask(BaseModel):
    title: str = ""
    completed: bool = False


@final
@register_base_model_class
class TaskRecord(BaseModel):
    """A student's task as stored by the task service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    title: str = "Untitled"
    priority: Optional[Priority] = None
    status: TaskStatus = TaskStatus.TODO
    completed: bool = False
    start_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    due_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("due_date", "dueDate", "date")
    )
    completed_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("completed_at", "completedAt")
    )
    tags: List[str] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)
    owner_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("owner_id", "assignedTo", "userId", "ownerId", "user_id"),
    )

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> Optional[str]:
        return _parse_identifier(value)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return str(value) if value else "Untitled"

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Optional[Priority]:
        return Priority.parse(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> TaskStatus:
        return TaskStatus.parse(value)

    @field_validator("completed", mode="before")
    @classmethod
    def _completed(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    @field_validator("start_date", "due_date", "completed_at", mode="before")
    @classmethod
    def _dates(cls, value: Any, info: ValidationInfo) -> Optional[datetime]:
        return _parse_date_field(value, info)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return _parse_tags(value)

    @field_validator("subtasks", mode="before")
    @classmethod
    def _subtasks(cls, value: Any) -> List[Any]:
        return list(value) if isinstance(value, (list, tuple)) else []

    @property
    def is_completed(self) -> bool:
        return self.completed or self.status in (TaskStatus.COMPLETED, TaskStatus.DONE_LATE)

    @property
    def relevant_date(self) -> Optional[datetime]:
        """Date used to place the task in a period: due date, else start date."""
        return self.due_date or self.start_date


@final
@register_base_model_class
class StressLogEntry(BaseModel):
    """A self-reported stress level (1-5) with optional stressor tags."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    timestamp: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("timestamp", "ts", "date")
    )
    level: float = 0.0
    tags: List[str] = Field(default_factory=list)
    owner_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("owner_id", "userId", "ownerId", "user_id")
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp(cls, value: Any, info: ValidationInfo) -> Optional[datetime]:
        return _parse_date_field(value, info)

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, value: Any) -> float:
        try:
            level = float(value)
        except (TypeError, ValueError):
            return 0.0
        return level if math.isfinite(level) else 0.0

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return _parse_tags(value)

    @field_validator("owner_id", mode="before")
    @classmethod
    def _owner(cls, value: Any) -> Optional[str]:
        return _parse_identifier(value)


@final
@register_base_model_class
class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id", "userId"))
    name: str = ""
    first_name: str = Field(default="", validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str = Field(default="", validation_alias=AliasChoices("last_name", "lastName"))
    department: str = ""
    level: str = Field(default="", validation_alias=AliasChoices("level", "yearLevel", "year_level"))
    student_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("student_id", "studentId")
    )

    @field_validator("id", "student_id", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> Optional[str]:
        return _parse_identifier(value)

    @field_validator("name", "first_name", "last_name", "department", "level", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value) if value is not None else ""

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@final
@register_base_model_class
class StudentProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))
    department: str = ""
    year_level: str = Field(default="", validation_alias=AliasChoices("year_level", "yearLevel"))
    student_number: str = Field(
        default="", validation_alias=AliasChoices("student_number", "studentNumber")
    )
    full_name: str = Field(default="", validation_alias=AliasChoices("full_name", "fullName"))
    first_name: str = Field(default="", validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str = Field(default="", validation_alias=AliasChoices("last_name", "lastName"))
    stress_percentage: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("stress_percentage", "stressPercentage")
    )
    stress_level: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("stress_level", "stressLevel")
    )

    @field_validator("user_id", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> Optional[str]:
        return _parse_identifier(value)

    @field_validator(
        "department", "year_level", "student_number", "full_name", "first_name", "last_name",
        mode="before",
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value) if value is not None else ""

    @field_validator("stress_percentage", "stress_level", mode="before")
    @classmethod
    def _number(cls, value: Any) -> Optional[float]:
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return " ".join(part for part in (self.first_name, self.last_name) if part)
