# src/taskboard/store/board.py

from __future__ import annotations

import logging
from pathlib import Path

from ..core.errors import SwimlaneNotFoundError
from ..tasks.task_models import Status
from .files import ListMapFile

logger = logging.getLogger(__name__)


class BoardIndex:
    """
    Swimlane -> ordered entity ids, for tasks and subtasks alike.

    Loaded once, held in memory and rewritten after every mutation.
    A missing file triggers first-run setup: every swimlane starts empty.

    Ids are unique within a swimlane: `add` and `move` never append an id
    that is already listed there.
    """

    def __init__(self, path: str | Path) -> None:
        self._file = ListMapFile(Path(path), "boards")
        self._file.load()
        if not self._file.existed:
            self._file.data = {s.value: [] for s in Status}
            self._file.save()
            logger.info("Board initialized at %s", self._file.path)
        logger.debug(
            "BoardIndex ready path=%s total=%s",
            self._file.path,
            sum(len(v) for v in self._file.data.values()),
        )

    def _lane(self, status: Status) -> list[str]:
        return self._file.data.setdefault(status.value, [])

    def add(self, entity_id: str, status: Status) -> None:
        lane = self._lane(Status.parse(status))
        if entity_id in lane:
            logger.debug("Board add skipped, %s already in %s", entity_id, status)
            return
        lane.append(entity_id)
        self._file.save()
        logger.debug("Board add id=%s status=%s", entity_id, status)

    def move(self, entity_id: str, from_status: Status, to_status: Status | str) -> None:
        target = Status.parse(to_status)
        source = self._lane(Status.parse(from_status))
        if entity_id in source:
            source.remove(entity_id)
        lane = self._lane(target)
        if entity_id not in lane:
            lane.append(entity_id)
        self._file.save()
        logger.debug("Board move id=%s %s -> %s", entity_id, from_status, target)

    def remove(self, entity_id: str, status: Status) -> None:
        lane = self._lane(Status.parse(status))
        if entity_id in lane:
            lane.remove(entity_id)
        self._file.save()
        logger.debug("Board remove id=%s status=%s", entity_id, status)

    def discard(self, entity_id: str) -> list[Status]:
        """Remove `entity_id` from every swimlane; returns where it was found."""
        found = self.locate(entity_id)
        if not found:
            return []
        for status in found:
            lane = self._file.data[status.value]
            self._file.data[status.value] = [x for x in lane if x != entity_id]
        self._file.save()
        logger.debug("Board discard id=%s from=%s", entity_id, [s.value for s in found])
        return found

    def list(self, status: Status) -> list[str]:
        status = Status.parse(status)
        lane = self._file.data.get(status.value)
        if lane is None:
            raise SwimlaneNotFoundError(status.value)
        return list(lane)

    def locate(self, entity_id: str) -> list[Status]:
        out: list[Status] = []
        for key, lane in self._file.data.items():
            if entity_id in lane:
                try:
                    out.append(Status(key))
                except ValueError:
                    logger.warning("Board holds unknown swimlane %r", key)
        return out

    def snapshot(self) -> dict[Status, list[str]]:
        out: dict[Status, list[str]] = {}
        for key, lane in self._file.data.items():
            try:
                out[Status(key)] = list(lane)
            except ValueError:
                logger.warning("Board holds unknown swimlane %r", key)
        return out
