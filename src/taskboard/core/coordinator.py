# src/taskboard/core/coordinator.py

"""
Consistency coordinator.

Every user-facing operation is a fixed sequence of calls into the record
stores, the board index, the link index and the notes index. Each call
persists on its own; nothing here is transactional.

Step order is chosen so that an interrupted delete can be finished by
running the same delete again (see `delete_task` / `delete_subtask`).
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from ..tasks.task_ids import IdGenerator
from ..tasks.task_models import (
    ACTIVE_SWIMLANES,
    DeadlineBucket,
    EntityKind,
    Priority,
    Status,
    Subtask,
    Task,
)
from .errors import CorruptRecordError, InconsistentStateError, NotFoundError, TaskNotFoundError
from .ports import BoardRepo, LinkRepo, NotesRepo, RecordRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoardRow:
    """
    One listed entity.

    Tasks carry `child_count`, subtasks carry `parent_id` (None if unlinked).
    """

    item: Task
    child_count: int | None = None
    parent_id: str | None = None

    @property
    def kind(self) -> EntityKind:
        return self.item.KIND


@dataclass(frozen=True, slots=True)
class SwimlaneGroup:
    status: Status
    rows: list[BoardRow] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TaskDetails:
    task: Task
    subtask_ids: list[str]
    notes: list[str]


@dataclass(frozen=True, slots=True)
class SubtaskDetails:
    subtask: Subtask
    parent_id: str | None
    notes: list[str]


@dataclass(frozen=True, slots=True)
class IntegrityIssue:
    code: str
    entity_id: str
    detail: str


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Coordinator:
    def __init__(
        self,
        *,
        tasks: RecordRepo[Task],
        subtasks: RecordRepo[Subtask],
        board: BoardRepo,
        links: LinkRepo,
        notes: NotesRepo,
        ids: IdGenerator | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._tasks = tasks
        self._subtasks = subtasks
        self._board = board
        self._links = links
        self._notes = notes
        self._ids = ids or IdGenerator()
        self._now = now or _local_now

    # ---- helpers ----

    def _today(self) -> date:
        return self._now().date()

    def _store_for(self, kind: EntityKind | str) -> RecordRepo:
        kind = EntityKind(str(kind).strip().lower())
        return self._subtasks if kind is EntityKind.SUBTASK else self._tasks

    def _id_taken(self, candidate: str) -> bool:
        return (
            self._tasks.exists(candidate)
            or self._subtasks.exists(candidate)
            or self._links.has_task(candidate)
            or bool(self._board.locate(candidate))
        )

    def _unboard(self, entity_id: str, status: Status) -> None:
        self._board.remove(entity_id, status)
        leftovers = self._board.locate(entity_id)
        if leftovers:
            logger.warning(
                "%s was also listed under %s; removing everywhere",
                entity_id,
                [s.value for s in leftovers],
            )
            self._board.discard(entity_id)

    def _leftovers_of_delete(self, entity_id: str, other: RecordRepo[Task]) -> bool:
        """True when a record-less id still has board, link or note entries to clean up."""
        if other.exists(entity_id):
            # A live record of the other kind owns those entries.
            return False
        return bool(
            self._board.locate(entity_id)
            or self._links.has_task(entity_id)
            or self._links.parent_of(entity_id)
            or self._notes.get_notes(entity_id)
        )

    def _warn_stale(self, entity_id: str, status: Status) -> None:
        err = InconsistentStateError(
            f"Board lists {entity_id} under {status} but it has no record",
            {"id": entity_id, "status": status.value},
        )
        logger.warning("[%s] %s", err.kind, err)

    def _row_for(self, entity_id: str, status: Status) -> BoardRow | None:
        if self._tasks.exists(entity_id):
            task = self._tasks.get(entity_id)
            return BoardRow(task, child_count=self._links.child_count(entity_id))
        if self._subtasks.exists(entity_id):
            sub = self._subtasks.get(entity_id)
            return BoardRow(sub, parent_id=self._links.parent_of(entity_id))
        self._warn_stale(entity_id, status)
        return None

    # ---- create ----

    def create_task(
        self,
        name: str,
        description: str,
        priority: Priority | str,
        deadline: date | None = None,
    ) -> str:
        task = Task(
            id=self._ids.next_id(EntityKind.TASK, self._id_taken),
            name=name,
            description=description,
            priority=Priority.parse(priority),
            added_on=self._now(),
            deadline=deadline,
        )
        self._tasks.put(task)
        self._board.add(task.id, task.status)
        self._links.link(task.id, [])
        logger.info("Task created id=%s priority=%s", task.id, task.priority)
        return task.id

    def create_subtask(
        self,
        name: str,
        description: str,
        priority: Priority | str,
        parent_task_id: str,
        deadline: date | None = None,
    ) -> str:
        if not self._tasks.exists(parent_task_id):
            raise TaskNotFoundError(parent_task_id, "has no task record")

        sub = Subtask(
            id=self._ids.next_id(EntityKind.SUBTASK, self._id_taken),
            name=name,
            description=description,
            priority=Priority.parse(priority),
            added_on=self._now(),
            deadline=deadline,
        )
        self._subtasks.put(sub)
        self._board.add(sub.id, sub.status)
        self._links.link(parent_task_id, [sub.id])
        logger.info("Subtask created id=%s parent=%s", sub.id, parent_task_id)
        return sub.id

    # ---- read ----

    def get_task(self, task_id: str) -> Task:
        return self._tasks.get(task_id)

    def get_subtask(self, subtask_id: str) -> Subtask:
        return self._subtasks.get(subtask_id)

    def open_task(self, task_id: str) -> TaskDetails:
        task = self._tasks.get(task_id)
        return TaskDetails(
            task=task,
            subtask_ids=self._links.children_of(task_id),
            notes=self._notes.get_notes(task_id),
        )

    def open_subtask(self, subtask_id: str) -> SubtaskDetails:
        sub = self._subtasks.get(subtask_id)
        return SubtaskDetails(
            subtask=sub,
            parent_id=self._links.parent_of(subtask_id),
            notes=self._notes.get_notes(subtask_id),
        )

    def parent_candidates(self) -> list[str]:
        """Task ids on the active swimlanes that can receive subtasks."""
        out: list[str] = []
        for status in ACTIVE_SWIMLANES:
            for entity_id in self._board.list(status):
                if self._tasks.exists(entity_id) and entity_id not in out:
                    out.append(entity_id)
        return out

    # ---- update ----

    def move(self, entity_id: str, kind: EntityKind | str, new_status: Status | str) -> Task:
        target = Status.parse(new_status)
        store = self._store_for(kind)
        item = store.get(entity_id)
        previous = item.status

        self._board.move(entity_id, previous, target)
        item.apply_status(target, now=self._now())
        store.put(item)

        logger.info("Moved %s %s -> %s", entity_id, previous, target)
        return item

    def edit(
        self,
        entity_id: str,
        kind: EntityKind | str,
        *,
        description: str | None = None,
        priority: Priority | str | None = None,
        deadline: date | None = None,
        clear_deadline: bool = False,
    ) -> Task:
        """Update the editable fields (description, priority, deadline) that are given."""
        store = self._store_for(kind)
        item = store.get(entity_id)
        if description is not None:
            item.description = description
        if priority is not None:
            item.priority = Priority.parse(priority)
        if clear_deadline:
            item.deadline = None
        elif deadline is not None:
            item.deadline = deadline
        store.put(item)
        logger.info("Edited %s", entity_id)
        return item

    def edit_task(self, task_id: str, **fields) -> Task:
        return self.edit(task_id, EntityKind.TASK, **fields)

    def edit_subtask(self, subtask_id: str, **fields) -> Subtask:
        return self.edit(subtask_id, EntityKind.SUBTASK, **fields)  # type: ignore[return-value]

    def relink(self, subtask_id: str, new_task_id: str) -> str | None:
        """Attach a subtask to `new_task_id`; returns the previous parent."""
        if not self._subtasks.exists(subtask_id):
            raise NotFoundError(subtask_id)
        if not self._tasks.exists(new_task_id):
            raise TaskNotFoundError(new_task_id, "has no task record")

        current = self._links.parent_of(subtask_id)
        if current is None:
            if not self._links.has_task(new_task_id):
                raise TaskNotFoundError(new_task_id)
            self._links.link(new_task_id, [subtask_id])
            logger.info("Linked previously unlinked subtask %s to %s", subtask_id, new_task_id)
        else:
            self._links.relink(subtask_id, current, new_task_id)
        return current

    def add_notes(self, entity_id: str, notes: Iterable[str]) -> list[str]:
        if not (self._tasks.exists(entity_id) or self._subtasks.exists(entity_id)):
            raise NotFoundError(entity_id)
        self._notes.add_notes(entity_id, notes)
        return self._notes.get_notes(entity_id)

    # ---- delete ----

    def delete_subtask(self, subtask_id: str) -> None:
        try:
            sub = self._subtasks.get(subtask_id)
        except NotFoundError:
            if not self._leftovers_of_delete(subtask_id, self._tasks):
                raise
            logger.warning("Subtask %s has no record; finishing an interrupted delete", subtask_id)
            self._board.discard(subtask_id)
        else:
            self._unboard(subtask_id, sub.status)
            self._subtasks.delete(subtask_id)

        self._links.unlink_subtask(subtask_id)
        self._notes.drop(subtask_id)
        logger.info("Subtask deleted id=%s", subtask_id)

    def _delete_child(self, parent_id: str, subtask_id: str) -> None:
        try:
            sub = self._subtasks.get(subtask_id)
        except NotFoundError:
            logger.warning(
                "Subtask %s of %s has no record; removing board entries only",
                subtask_id,
                parent_id,
            )
            self._board.discard(subtask_id)
        else:
            self._unboard(subtask_id, sub.status)
            self._subtasks.delete(subtask_id)
        self._notes.drop(subtask_id)

    def delete_task(self, task_id: str) -> list[str]:
        """
        Delete a task and every linked subtask; returns the deleted subtask ids.

        Stops at the first failure without rolling back. Running it again
        finishes the job: children and the task itself are tolerated as
        already gone while its link entry, board membership or notes remain.
        """
        status: Status | None
        try:
            status = self._tasks.get(task_id).status
        except NotFoundError:
            if not self._leftovers_of_delete(task_id, self._subtasks):
                raise
            logger.warning("Task %s has no record; finishing an interrupted delete", task_id)
            status = None

        children = self._links.children_of(task_id)
        for subtask_id in children:
            self._delete_child(task_id, subtask_id)

        if status is not None:
            self._unboard(task_id, status)
            self._tasks.delete(task_id)
        else:
            self._board.discard(task_id)
        self._links.unlink_task(task_id)
        self._notes.drop(task_id)

        logger.info("Task deleted id=%s subtasks=%d", task_id, len(children))
        return children

    # ---- list / filter ----

    def list_tasks(self, swimlanes: str = "all") -> list[SwimlaneGroup]:
        groups: list[SwimlaneGroup] = []
        for status in Status.parse_filter(swimlanes):
            rows: list[BoardRow] = []
            for entity_id in self._board.list(status):
                if self._tasks.exists(entity_id):
                    task = self._tasks.get(entity_id)
                    rows.append(BoardRow(task, child_count=self._links.child_count(entity_id)))
                elif not self._subtasks.exists(entity_id):
                    self._warn_stale(entity_id, status)
            groups.append(SwimlaneGroup(status, rows))
        return groups

    def list_subtasks(self, swimlanes: str = "all") -> list[SwimlaneGroup]:
        groups: list[SwimlaneGroup] = []
        for status in Status.parse_filter(swimlanes):
            rows: list[BoardRow] = []
            for entity_id in self._board.list(status):
                if self._subtasks.exists(entity_id):
                    sub = self._subtasks.get(entity_id)
                    rows.append(BoardRow(sub, parent_id=self._links.parent_of(entity_id)))
                elif not self._tasks.exists(entity_id):
                    self._warn_stale(entity_id, status)
            groups.append(SwimlaneGroup(status, rows))
        return groups

    def _filter(self, predicate: Callable[[Task], bool]) -> list[SwimlaneGroup]:
        groups: list[SwimlaneGroup] = []
        for status in ACTIVE_SWIMLANES:
            rows: list[BoardRow] = []
            for entity_id in self._board.list(status):
                row = self._row_for(entity_id, status)
                if row is not None and predicate(row.item):
                    rows.append(row)
            groups.append(SwimlaneGroup(status, rows))
        return groups

    def filter_by_deadline(self, keyword: str) -> list[SwimlaneGroup]:
        bucket = DeadlineBucket.parse(keyword)
        today = self._today()
        return self._filter(lambda item: bucket.matches(item.deadline, today))

    def filter_by_priority(self, keyword: str) -> list[SwimlaneGroup]:
        priority = Priority.parse(keyword)
        return self._filter(lambda item: item.priority is priority)

    # ---- integrity ----

    def check_integrity(self) -> list[IntegrityIssue]:
        """Read-only scan for violations of the cross-store invariants."""
        issues: list[IntegrityIssue] = []
        on_board: set[str] = set()

        for status, ids in self._board.snapshot().items():
            for entity_id, n in Counter(ids).items():
                if n > 1:
                    issues.append(
                        IntegrityIssue("duplicate-board-entry", entity_id, f"{n}x under {status}")
                    )
            for entity_id in dict.fromkeys(ids):
                on_board.add(entity_id)
                store = (
                    self._tasks
                    if self._tasks.exists(entity_id)
                    else self._subtasks
                    if self._subtasks.exists(entity_id)
                    else None
                )
                if store is None:
                    issues.append(
                        IntegrityIssue("missing-record", entity_id, f"listed under {status}")
                    )
                    continue
                try:
                    item = store.get(entity_id)
                except CorruptRecordError as e:
                    issues.append(IntegrityIssue("corrupt-record", entity_id, str(e)))
                    continue
                if item.status is not status:
                    issues.append(
                        IntegrityIssue(
                            "status-mismatch",
                            entity_id,
                            f"listed under {status}, record says {item.status}",
                        )
                    )

        for entity_id in [*self._tasks.ids(), *self._subtasks.ids()]:
            if entity_id not in on_board:
                issues.append(IntegrityIssue("not-on-board", entity_id, "record has no swimlane"))

        owner: dict[str, str] = {}
        for task_id in self._links.task_ids():
            if not self._tasks.exists(task_id):
                issues.append(
                    IntegrityIssue("missing-parent-record", task_id, "link entry without a task")
                )
            children = self._links.children_of(task_id)
            for subtask_id, n in Counter(children).items():
                if n > 1:
                    issues.append(
                        IntegrityIssue("duplicate-link", subtask_id, f"{n}x under {task_id}")
                    )
            for subtask_id in dict.fromkeys(children):
                if not self._subtasks.exists(subtask_id):
                    issues.append(
                        IntegrityIssue("missing-subtask-record", subtask_id, f"linked to {task_id}")
                    )
                if subtask_id in owner:
                    issues.append(
                        IntegrityIssue(
                            "multiple-parents",
                            subtask_id,
                            f"linked to {owner[subtask_id]} and {task_id}",
                        )
                    )
                else:
                    owner[subtask_id] = task_id

        for subtask_id in self._subtasks.ids():
            if subtask_id not in owner:
                issues.append(IntegrityIssue("unlinked-subtask", subtask_id, "no parent task"))

        if issues:
            logger.warning("Integrity check found %d issue(s)", len(issues))
        return issues
