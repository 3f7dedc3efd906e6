# src/taskboard/store/links.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..core.errors import TaskNotFoundError
from .files import ListMapFile

logger = logging.getLogger(__name__)


class LinkIndex:
    """
    Parent task id -> ordered subtask ids.

    A task with an entry (possibly empty) is a "recognized parent".
    Reverse lookup is a linear scan in insertion order; the first list that
    contains the subtask wins.
    """

    def __init__(self, path: str | Path) -> None:
        self._file = ListMapFile(Path(path), "tasks")
        self._file.load()
        logger.debug("LinkIndex ready path=%s parents=%s", self._file.path, len(self._file.data))

    def link(self, task_id: str, subtask_ids: Iterable[str]) -> None:
        children = self._file.data.setdefault(task_id, [])
        for sid in subtask_ids:
            if sid not in children:
                children.append(sid)
        self._file.save()
        logger.debug("Linked task=%s children=%s", task_id, len(children))

    def relink(self, subtask_id: str, from_task_id: str, to_task_id: str) -> None:
        if from_task_id not in self._file.data:
            raise TaskNotFoundError(from_task_id)
        if to_task_id not in self._file.data:
            raise TaskNotFoundError(to_task_id)

        source = self._file.data[from_task_id]
        if subtask_id in source:
            source.remove(subtask_id)
        target = self._file.data[to_task_id]
        if subtask_id not in target:
            target.append(subtask_id)
        self._file.save()
        logger.info("Relinked subtask=%s %s -> %s", subtask_id, from_task_id, to_task_id)

    def parent_of(self, subtask_id: str) -> str | None:
        for task_id, children in self._file.data.items():
            if subtask_id in children:
                return task_id
        return None

    def children_of(self, task_id: str) -> list[str]:
        return list(self._file.data.get(task_id, []))

    def child_count(self, task_id: str) -> int:
        return len(self.children_of(task_id))

    def has_task(self, task_id: str) -> bool:
        return task_id in self._file.data

    def task_ids(self) -> list[str]:
        return list(self._file.data)

    def unlink_task(self, task_id: str) -> None:
        if self._file.data.pop(task_id, None) is None:
            return
        self._file.save()
        logger.debug("Unlinked task=%s", task_id)

    def unlink_subtask(self, subtask_id: str) -> None:
        parent = self.parent_of(subtask_id)
        if parent is None:
            return
        self._file.data[parent].remove(subtask_id)
        self._file.save()
        logger.debug("Unlinked subtask=%s from task=%s", subtask_id, parent)
