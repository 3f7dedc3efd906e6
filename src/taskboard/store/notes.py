# src/taskboard/store/notes.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .files import ListMapFile

logger = logging.getLogger(__name__)


class NotesIndex:
    """Entity id -> free-text notes, oldest first."""

    def __init__(self, path: str | Path) -> None:
        self._file = ListMapFile(Path(path), "notes")
        self._file.load()

    def add_notes(self, entity_id: str, notes: Iterable[str]) -> None:
        clean = [n.strip() for n in notes if n and n.strip()]
        if not clean:
            return
        self._file.data.setdefault(entity_id, []).extend(clean)
        self._file.save()
        logger.debug("Added %d note(s) to %s", len(clean), entity_id)

    def get_notes(self, entity_id: str) -> list[str]:
        return list(self._file.data.get(entity_id, []))

    def drop(self, entity_id: str) -> None:
        if self._file.data.pop(entity_id, None) is None:
            return
        self._file.save()
