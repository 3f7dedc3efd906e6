# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import build_coordinator
from taskboard.core.coordinator import Coordinator
from taskboard.core.state import AppState
from taskboard.tasks.task_ids import IdGenerator

from .fakes import (
    FIXED_CLOCK_MS,
    FakeBoard,
    FakeLinks,
    FakeNotes,
    FakeRecordRepo,
    FixedClock,
)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "board"
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="WARNING",
        prompt="boards> ",
        # Paths (tmp per test run)
        data_dir=data_dir,
        tasks_dir=data_dir / "tasks",
        subtasks_dir=data_dir / "subtasks",
        board_path=data_dir / "boards.json",
        links_path=data_dir / "tasks_link.json",
        notes_path=data_dir / "notes.json",
        log_dir=data_dir / "logs",
        id_digits=5,
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def coordinator(settings: SimpleNamespace, clock: FixedClock) -> Coordinator:
    """
    Coordinator over the real file-backed stores in tmp_path.

    The id clock is frozen, so ids are predictable: TASK-00123, TASK-00124, ...
    """
    return build_coordinator(settings, now=clock, clock_ms=lambda: FIXED_CLOCK_MS)


@pytest.fixture()
def state(settings: SimpleNamespace, coordinator: Coordinator) -> AppState:
    return AppState(settings=settings, coordinator=coordinator)


@pytest.fixture()
def fake_parts() -> SimpleNamespace:
    return SimpleNamespace(
        tasks=FakeRecordRepo(),
        subtasks=FakeRecordRepo(),
        board=FakeBoard(),
        links=FakeLinks(),
        notes=FakeNotes(),
    )


@pytest.fixture()
def fake_coordinator(fake_parts: SimpleNamespace, clock: FixedClock) -> Coordinator:
    """Coordinator over in-memory fakes; use `fake_parts` to inspect or break them."""
    return Coordinator(
        tasks=fake_parts.tasks,
        subtasks=fake_parts.subtasks,
        board=fake_parts.board,
        links=fake_parts.links,
        notes=fake_parts.notes,
        ids=IdGenerator(digits=5, clock_ms=lambda: FIXED_CLOCK_MS),
        now=clock,
    )
