# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the data directories exist,
- wires the concrete stores into a Coordinator held by AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..config import get_settings
from ..core.coordinator import Coordinator
from ..core.state import AppState
from ..store.board import BoardIndex
from ..store.files import ensure_dir
from ..store.links import LinkIndex
from ..store.notes import NotesIndex
from ..store.records import subtask_store, task_store
from ..tasks.task_ids import IdGenerator

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    ensure_dir(settings.data_dir)
    ensure_dir(settings.tasks_dir)
    ensure_dir(settings.subtasks_dir)
    ensure_dir(settings.board_path.parent)
    ensure_dir(settings.links_path.parent)
    ensure_dir(settings.notes_path.parent)


def build_coordinator(
    settings,
    *,
    now: Callable[[], datetime] | None = None,
    clock_ms: Callable[[], int] | None = None,
) -> Coordinator:
    """Open (or create on first run) every store under the configured paths."""
    _ensure_local_dirs(settings)
    return Coordinator(
        tasks=task_store(settings.tasks_dir),
        subtasks=subtask_store(settings.subtasks_dir),
        board=BoardIndex(settings.board_path),
        links=LinkIndex(settings.links_path),
        notes=NotesIndex(settings.notes_path),
        ids=IdGenerator(digits=getattr(settings, "id_digits", 5), clock_ms=clock_ms),
        now=now,
    )


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    state = AppState(settings=settings, coordinator=build_coordinator(settings))
    logger.info("Board data ready at %s", settings.data_dir)
    return state
