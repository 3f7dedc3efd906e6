# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The coordinator depends on Protocols instead of concrete stores.
This keeps the on-disk layout swappable and lets tests use in-memory fakes.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol, TypeVar

from ..tasks.task_models import Priority, Status, Task

T = TypeVar("T", bound=Task)


class RecordRepo(Protocol[T]):
    def exists(self, entity_id: str) -> bool: ...
    def get(self, entity_id: str) -> T: ...
    def put(self, item: T) -> None: ...
    def delete(self, entity_id: str) -> None: ...
    def ids(self) -> list[str]: ...


class BoardRepo(Protocol):
    def add(self, entity_id: str, status: Status) -> None: ...
    def move(self, entity_id: str, from_status: Status, to_status: Status | str) -> None: ...
    def remove(self, entity_id: str, status: Status) -> None: ...
    def discard(self, entity_id: str) -> list[Status]: ...
    def list(self, status: Status) -> list[str]: ...
    def locate(self, entity_id: str) -> list[Status]: ...
    def snapshot(self) -> dict[Status, list[str]]: ...


class LinkRepo(Protocol):
    def link(self, task_id: str, subtask_ids: Iterable[str]) -> None: ...
    def relink(self, subtask_id: str, from_task_id: str, to_task_id: str) -> None: ...
    def parent_of(self, subtask_id: str) -> str | None: ...
    def children_of(self, task_id: str) -> list[str]: ...
    def child_count(self, task_id: str) -> int: ...
    def has_task(self, task_id: str) -> bool: ...
    def task_ids(self) -> list[str]: ...
    def unlink_task(self, task_id: str) -> None: ...
    def unlink_subtask(self, subtask_id: str) -> None: ...


class NotesRepo(Protocol):
    def add_notes(self, entity_id: str, notes: Iterable[str]) -> None: ...
    def get_notes(self, entity_id: str) -> list[str]: ...
    def drop(self, entity_id: str) -> None: ...


class Prompter(Protocol):
    """
    CLI-side port: how command handlers ask the user for values.

    Implementations return already-validated values.
    """

    def text(self, message: str, default: str | None = None) -> str: ...
    def confirm(self, message: str, help_text: str | None = None) -> bool: ...
    def priority(self, message: str) -> Priority: ...
    def deadline(self, message: str) -> date: ...
    def choose(self, message: str, options: Sequence[str]) -> str: ...
