# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any, ClassVar

from ..core.errors import (
    CorruptRecordError,
    InvalidDeadlineKeywordError,
    InvalidPriorityKeywordError,
    InvalidSwimlaneError,
)

SCHEMA_VERSION = 1


class Status(StrEnum):
    """
    Swimlane a task or subtask sits in.

    Values are the keywords accepted on the command line and stored on disk.
    """

    TO_DO = "to-do"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    IN_REVIEW = "in-review"
    DONE = "done"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def parse(cls, keyword: str | Status) -> Status:
        if isinstance(keyword, Status):
            return keyword
        try:
            return cls(str(keyword).strip().lower())
        except ValueError:
            raise InvalidSwimlaneError(str(keyword), [s.value for s in cls]) from None

    @classmethod
    def parse_filter(cls, keyword: str) -> tuple[Status, ...]:
        """Resolve "all" or a single swimlane keyword to the swimlanes to show."""
        kw = str(keyword).strip().lower()
        if kw == ALL_SWIMLANES:
            return tuple(cls)
        try:
            return (cls(kw),)
        except ValueError:
            raise InvalidSwimlaneError(
                str(keyword), [ALL_SWIMLANES, *(s.value for s in cls)]
            ) from None


ALL_SWIMLANES = "all"

_STATUS_LABELS = {
    Status.TO_DO: "To-Do",
    Status.IN_PROGRESS: "In Progress",
    Status.BLOCKED: "Blocked",
    Status.IN_REVIEW: "In Review",
    Status.DONE: "Done",
}

# Swimlanes scanned by the deadline/priority filters (done is never included).
ACTIVE_SWIMLANES: tuple[Status, ...] = (
    Status.TO_DO,
    Status.IN_PROGRESS,
    Status.BLOCKED,
    Status.IN_REVIEW,
)


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, keyword: str | Priority) -> Priority:
        if isinstance(keyword, Priority):
            return keyword
        for p in cls:
            if p.value.lower() == str(keyword).strip().lower():
                return p
        raise InvalidPriorityKeywordError(str(keyword), [p.value.lower() for p in cls])


class DeadlineBucket(StrEnum):
    PAST_DEADLINE = "past-deadline"
    TODAY = "today"
    TOMORROW = "tomorrow"
    AFTER_TOMORROW = "after-tomorrow"
    NO_DEADLINE = "no-deadline"

    @classmethod
    def parse(cls, keyword: str | DeadlineBucket) -> DeadlineBucket:
        if isinstance(keyword, DeadlineBucket):
            return keyword
        try:
            return cls(str(keyword).strip().lower())
        except ValueError:
            raise InvalidDeadlineKeywordError(str(keyword), [b.value for b in cls]) from None

    def matches(self, deadline: date | None, today: date) -> bool:
        if self is DeadlineBucket.NO_DEADLINE:
            return deadline is None
        if deadline is None:
            return False
        tomorrow = today + timedelta(days=1)
        if self is DeadlineBucket.PAST_DEADLINE:
            return deadline < today
        if self is DeadlineBucket.TODAY:
            return deadline == today
        if self is DeadlineBucket.TOMORROW:
            return deadline == tomorrow
        return deadline > tomorrow


class EntityKind(StrEnum):
    TASK = "task"
    SUBTASK = "subtask"

    @property
    def id_prefix(self) -> str:
        return self.value.upper()


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_to_dt(raw: Any) -> datetime | None:
    return datetime.fromisoformat(raw) if raw is not None else None


def _str_to_date(raw: Any) -> date | None:
    return date.fromisoformat(raw) if raw is not None else None


@dataclass(slots=True)
class Task:
    """
    A top-level work item.

    `started_on` and `completed_on` are stamped once by `apply_status` and never
    cleared by later transitions.
    """

    KIND: ClassVar[EntityKind] = EntityKind.TASK

    id: str
    name: str
    description: str
    priority: Priority
    added_on: datetime
    status: Status = Status.TO_DO
    deadline: date | None = None
    started_on: datetime | None = None
    completed_on: datetime | None = None

    def apply_status(self, new_status: Status, *, now: datetime) -> None:
        if new_status is not Status.TO_DO and self.started_on is None:
            self.started_on = now
        if new_status is Status.DONE and self.completed_on is None:
            self.completed_on = now
        self.status = new_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": SCHEMA_VERSION,
            "kind": self.KIND.value,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "added_on": _dt_to_str(self.added_on),
            "started_on": _dt_to_str(self.started_on),
            "deadline": self.deadline.isoformat() if self.deadline is not None else None,
            "completed_on": _dt_to_str(self.completed_on),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        if not isinstance(data, dict):
            raise CorruptRecordError(f"{cls.KIND} record is not an object")
        schema = data.get("schema")
        if schema != SCHEMA_VERSION:
            raise CorruptRecordError(
                f"Unsupported {cls.KIND} record schema {schema!r} (expected {SCHEMA_VERSION})"
            )
        if data.get("kind") != cls.KIND.value:
            raise CorruptRecordError(
                f"Expected a {cls.KIND} record, found kind={data.get('kind')!r}"
            )
        try:
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                description=str(data["description"]),
                priority=Priority(data["priority"]),
                status=Status(data["status"]),
                added_on=datetime.fromisoformat(data["added_on"]),
                started_on=_str_to_dt(data.get("started_on")),
                deadline=_str_to_date(data.get("deadline")),
                completed_on=_str_to_dt(data.get("completed_on")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptRecordError(f"Malformed {cls.KIND} record: {e}") from e


@dataclass(slots=True)
class Subtask(Task):
    """Same fields as a Task; owned by exactly one parent task via the link index."""

    KIND: ClassVar[EntityKind] = EntityKind.SUBTASK
