# src/taskboard/store/records.py

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Generic, TypeVar

from ..core.errors import CorruptRecordError, NotFoundError
from ..tasks.task_models import Subtask, Task
from .files import atomic_write_json, ensure_dir, read_json, remove_file

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Task)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class RecordStore(Generic[T]):
    """
    One JSON file per entity (`<dir>/<id>.json`).

    Writes replace the whole file atomically; there is no locking and no
    versioning beyond the schema number stored in each record.
    """

    def __init__(self, directory: str | Path, model: type[T]) -> None:
        self._dir = Path(directory)
        self._model = model
        ensure_dir(self._dir)
        logger.debug("RecordStore ready kind=%s dir=%s", model.KIND, self._dir)

    @property
    def kind(self) -> str:
        return self._model.KIND.value

    def _path(self, entity_id: str) -> Path:
        # Ids come from the command line; never let them escape the directory.
        if not _SAFE_ID.match(entity_id or ""):
            raise NotFoundError(entity_id)
        return self._dir / f"{entity_id}.json"

    def exists(self, entity_id: str) -> bool:
        if not _SAFE_ID.match(entity_id or ""):
            return False
        return self._path(entity_id).is_file()

    def get(self, entity_id: str) -> T:
        data = read_json(self._path(entity_id), entity_id=entity_id)
        item = self._model.from_dict(data)
        if item.id != entity_id:
            raise CorruptRecordError(
                f"Record file for {entity_id} holds id {item.id}", self._path(entity_id)
            )
        return item  # type: ignore[return-value]

    def put(self, item: T) -> None:
        atomic_write_json(self._path(item.id), item.to_dict())
        logger.debug("Record written kind=%s id=%s status=%s", self.kind, item.id, item.status)

    def delete(self, entity_id: str) -> None:
        remove_file(self._path(entity_id), entity_id=entity_id)
        logger.debug("Record deleted kind=%s id=%s", self.kind, entity_id)

    def ids(self) -> list[str]:
        return sorted(p.stem for p in self._dir.glob("*.json") if p.is_file())


def task_store(directory: str | Path) -> RecordStore[Task]:
    return RecordStore(directory, Task)


def subtask_store(directory: str | Path) -> RecordStore[Subtask]:
    return RecordStore(directory, Subtask)
