# src/taskboard/core/errors.py

"""Typed errors raised by the stores and the coordinator.

Every error carries a short ``kind`` used by the CLI when printing
("[NotFound] ...") plus optional ``details`` for logs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class TaskboardError(Exception):
    """Base exception for all taskboard errors."""

    kind = "TaskboardError"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class StorageError(TaskboardError):
    """Base for errors tied to a file on disk."""

    def __init__(
        self, message: str, path: Path | None = None, details: dict[str, Any] | None = None
    ) -> None:
        details = details or {}
        if path is not None:
            details["path"] = str(path)
        super().__init__(message, details)
        self.path = path


class NotFoundError(StorageError):
    """An id has no backing record."""

    kind = "NotFound"

    def __init__(self, entity_id: str, path: Path | None = None) -> None:
        super().__init__(f"{entity_id} not found", path)
        self.entity_id = entity_id


class CorruptRecordError(StorageError):
    """A file exists but cannot be decoded, or its schema does not match."""

    kind = "Corrupt"


class StorageIOError(StorageError):
    """Read, write, delete or mkdir failed at the OS level."""

    kind = "IOFailure"


class KeywordError(TaskboardError):
    """Base for unrecognized input keywords."""

    what = "keyword"

    def __init__(self, keyword: str, options: list[str]) -> None:
        opts = " ".join(f"{i}) {o}" for i, o in enumerate(options, start=1))
        super().__init__(f"Invalid {self.what} '{keyword}'. Please select from: {opts}")
        self.keyword = keyword
        self.options = list(options)


class InvalidSwimlaneError(KeywordError):
    kind = "InvalidSwimlane"
    what = "swimlane"


class InvalidDeadlineKeywordError(KeywordError):
    kind = "InvalidDeadlineKeyword"
    what = "deadline keyword"


class InvalidPriorityKeywordError(KeywordError):
    kind = "InvalidPriorityKeyword"
    what = "priority keyword"


class SwimlaneNotFoundError(TaskboardError):
    """The board aggregate has no entry for a swimlane."""

    kind = "SwimlaneNotFound"

    def __init__(self, status: str) -> None:
        super().__init__(f"Swimlane {status} is not initialized on the board")
        self.status = status


class TaskNotFoundError(TaskboardError):
    """A parent task id is not known to the link index (or has no record)."""

    kind = "TaskNotFound"

    def __init__(self, task_id: str, reason: str = "is not a recognized parent task") -> None:
        super().__init__(f"{task_id} {reason}")
        self.task_id = task_id


class InconsistentStateError(TaskboardError):
    """The board or link index references an id with no backing record."""

    kind = "InconsistentState"


class IdSpaceExhaustedError(TaskboardError):
    """Every id of one kind with the configured digit count is taken."""

    kind = "IdSpaceExhausted"
