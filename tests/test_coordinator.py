# tests/test_coordinator.py

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta

import pytest

from taskboard.cli.bootstrap import build_coordinator
from taskboard.core.errors import (
    InvalidDeadlineKeywordError,
    InvalidPriorityKeywordError,
    InvalidSwimlaneError,
    NotFoundError,
    StorageIOError,
    TaskNotFoundError,
)
from taskboard.tasks.task_models import Priority, Status


def _lane_count(coordinator, entity_id: str, status: Status) -> int:
    return coordinator._board.list(status).count(entity_id)


def _everywhere(coordinator, entity_id: str) -> int:
    return sum(lane.count(entity_id) for lane in coordinator._board.snapshot().values())


def _ids(groups) -> list[str]:
    return [row.item.id for group in groups for row in group.rows]


# ---- scenario on the real file-backed stores ----


def test_end_to_end_scenario(coordinator, clock) -> None:
    task_id = coordinator.create_task("Release", "Ship 1.0", "Medium")
    sub_id = coordinator.create_subtask("Changelog", "Write it", Priority.LOW, task_id)

    assert task_id == "TASK-00123"
    assert sub_id == "SUBTASK-00123"
    assert coordinator._links.child_count(task_id) == 1

    clock.advance(hours=1)
    moved = coordinator.move(task_id, "task", "in-progress")
    assert moved.started_on == clock()
    assert coordinator.get_task(task_id).started_on == clock()

    coordinator.delete_task(task_id)

    with pytest.raises(NotFoundError):
        coordinator.get_task(task_id)
    with pytest.raises(NotFoundError):
        coordinator.get_subtask(sub_id)
    assert task_id not in coordinator._board.list(Status.IN_PROGRESS)


def test_create_task_registers_everywhere(coordinator) -> None:
    task_id = coordinator.create_task("A", "desc", "high", deadline=date(2026, 3, 20))

    task = coordinator.get_task(task_id)
    assert task.status is Status.TO_DO
    assert task.priority is Priority.HIGH
    assert task.deadline == date(2026, 3, 20)
    assert coordinator._board.list(Status.TO_DO) == [task_id]
    assert coordinator._links.has_task(task_id)
    assert coordinator._links.children_of(task_id) == []


def test_ids_stay_unique_within_the_same_millisecond(coordinator) -> None:
    ids = [coordinator.create_task(f"T{i}", "", "low") for i in range(3)]
    assert ids == ["TASK-00123", "TASK-00124", "TASK-00125"]


def test_create_subtask_needs_existing_parent(coordinator) -> None:
    with pytest.raises(TaskNotFoundError):
        coordinator.create_subtask("orphan", "", "low", "TASK-99999")
    assert coordinator._subtasks.ids() == []


def test_create_task_rejects_bad_priority(coordinator) -> None:
    with pytest.raises(InvalidPriorityKeywordError):
        coordinator.create_task("A", "", "urgent")
    assert coordinator._tasks.ids() == []


def test_move_updates_board_and_record(coordinator) -> None:
    task_id = coordinator.create_task("A", "", "low")
    before_src = _lane_count(coordinator, task_id, Status.TO_DO)
    before_dst = _lane_count(coordinator, task_id, Status.BLOCKED)

    coordinator.move(task_id, "task", Status.BLOCKED)

    assert _lane_count(coordinator, task_id, Status.TO_DO) == before_src - 1
    assert _lane_count(coordinator, task_id, Status.BLOCKED) == before_dst + 1
    assert coordinator.get_task(task_id).status is Status.BLOCKED


def test_move_to_done_stamps_completion_once(coordinator, clock) -> None:
    task_id = coordinator.create_task("A", "", "low")
    first = clock.advance(minutes=10)
    coordinator.move(task_id, "task", "done")
    clock.advance(minutes=10)
    coordinator.move(task_id, "task", "in-review")
    coordinator.move(task_id, "task", "done")

    task = coordinator.get_task(task_id)
    assert task.started_on == first
    assert task.completed_on == first


def test_move_rejects_unknown_lane_without_changes(coordinator) -> None:
    task_id = coordinator.create_task("A", "", "low")
    with pytest.raises(InvalidSwimlaneError):
        coordinator.move(task_id, "task", "later")
    assert coordinator.get_task(task_id).status is Status.TO_DO
    assert coordinator._board.list(Status.TO_DO) == [task_id]


def test_move_missing_record_raises(coordinator) -> None:
    with pytest.raises(NotFoundError):
        coordinator.move("SUBTASK-00001", "subtask", "done")


def test_cascade_delete_leaves_nothing_behind(coordinator) -> None:
    task_id = coordinator.create_task("Parent", "", "medium")
    subs = [coordinator.create_subtask(f"S{i}", "", "low", task_id) for i in range(3)]
    coordinator.move(subs[1], "subtask", "done")
    coordinator.add_notes(task_id, ["remember"])
    coordinator.add_notes(subs[0], ["child note"])

    deleted = coordinator.delete_task(task_id)

    assert deleted == subs
    assert coordinator._tasks.ids() == []
    assert coordinator._subtasks.ids() == []
    for entity_id in [task_id, *subs]:
        assert _everywhere(coordinator, entity_id) == 0
        assert coordinator._notes.get_notes(entity_id) == []
    assert not coordinator._links.has_task(task_id)


def test_delete_unknown_task_raises(coordinator) -> None:
    with pytest.raises(NotFoundError):
        coordinator.delete_task("TASK-00001")


def test_delete_subtask_detaches_from_parent(coordinator) -> None:
    task_id = coordinator.create_task("Parent", "", "medium")
    keep = coordinator.create_subtask("keep", "", "low", task_id)
    drop = coordinator.create_subtask("drop", "", "low", task_id)

    coordinator.delete_subtask(drop)

    assert coordinator._links.children_of(task_id) == [keep]
    assert coordinator._links.child_count(task_id) == 1
    assert _everywhere(coordinator, drop) == 0
    assert not coordinator._subtasks.exists(drop)


def test_child_count_tracks_children(coordinator) -> None:
    a = coordinator.create_task("A", "", "low")
    b = coordinator.create_task("B", "", "low")
    s1 = coordinator.create_subtask("s1", "", "low", a)
    coordinator.create_subtask("s2", "", "low", a)
    coordinator.relink(s1, b)
    coordinator.create_subtask("s3", "", "low", b)

    for task_id in (a, b):
        links = coordinator._links
        assert links.child_count(task_id) == len(links.children_of(task_id))
    assert coordinator._links.child_count(a) == 1
    assert coordinator._links.child_count(b) == 2


def test_relink_moves_subtask_to_new_parent(coordinator) -> None:
    a = coordinator.create_task("A", "", "low")
    b = coordinator.create_task("B", "", "low")
    sub = coordinator.create_subtask("s", "", "low", a)

    previous = coordinator.relink(sub, b)

    assert previous == a
    assert coordinator._links.parent_of(sub) == b
    assert sub not in coordinator._links.children_of(a)
    assert coordinator.open_subtask(sub).parent_id == b


def test_relink_to_unknown_task_raises(coordinator) -> None:
    a = coordinator.create_task("A", "", "low")
    sub = coordinator.create_subtask("s", "", "low", a)
    with pytest.raises(TaskNotFoundError):
        coordinator.relink(sub, "TASK-77777")
    assert coordinator._links.parent_of(sub) == a


def test_edit_changes_only_given_fields(coordinator) -> None:
    task_id = coordinator.create_task("A", "old", "low", deadline=date(2026, 3, 11))

    coordinator.edit_task(task_id, priority="high")
    task = coordinator.get_task(task_id)
    assert task.priority is Priority.HIGH
    assert task.description == "old"
    assert task.deadline == date(2026, 3, 11)

    coordinator.edit_task(task_id, description="new", clear_deadline=True)
    task = coordinator.get_task(task_id)
    assert task.description == "new"
    assert task.deadline is None
    assert task.name == "A"


def test_open_task_collects_subtasks_and_notes(coordinator) -> None:
    task_id = coordinator.create_task("A", "", "low")
    sub = coordinator.create_subtask("s", "", "low", task_id)
    coordinator.add_notes(task_id, ["first", "second"])

    details = coordinator.open_task(task_id)
    assert details.task.id == task_id
    assert details.subtask_ids == [sub]
    assert details.notes == ["first", "second"]


def test_add_notes_requires_a_record(coordinator) -> None:
    with pytest.raises(NotFoundError):
        coordinator.add_notes("TASK-00001", ["x"])


def test_parent_candidates_skip_done_tasks_and_subtasks(coordinator) -> None:
    a = coordinator.create_task("A", "", "low")
    b = coordinator.create_task("B", "", "low")
    coordinator.create_subtask("s", "", "low", a)
    coordinator.move(b, "task", "done")

    assert coordinator.parent_candidates() == [a]


def test_list_tasks_and_subtasks_by_swimlane(coordinator) -> None:
    a = coordinator.create_task("A", "", "low")
    b = coordinator.create_task("B", "", "low")
    sub = coordinator.create_subtask("s", "", "low", a)
    coordinator.move(b, "task", "blocked")

    groups = coordinator.list_tasks()
    assert [g.status for g in groups] == list(Status)
    by_status = {g.status: g for g in groups}
    assert [r.item.id for r in by_status[Status.TO_DO].rows] == [a]
    assert by_status[Status.TO_DO].rows[0].child_count == 1
    assert [r.item.id for r in by_status[Status.BLOCKED].rows] == [b]

    (only,) = coordinator.list_subtasks("to-do")
    assert only.status is Status.TO_DO
    assert [(r.item.id, r.parent_id) for r in only.rows] == [(sub, a)]

    with pytest.raises(InvalidSwimlaneError):
        coordinator.list_tasks("someday")


def test_filter_by_priority_is_idempotent_and_skips_done(coordinator) -> None:
    a = coordinator.create_task("A", "", "high")
    b = coordinator.create_task("B", "", "high")
    coordinator.create_task("C", "", "low")
    sub = coordinator.create_subtask("s", "", "high", a)
    coordinator.move(b, "task", "done")

    first = coordinator.filter_by_priority("HIGH")
    second = coordinator.filter_by_priority("high")

    assert _ids(first) == _ids(second) == [a, sub]
    assert Status.DONE not in [g.status for g in first]

    with pytest.raises(InvalidPriorityKeywordError):
        coordinator.filter_by_priority("critical")


def test_filter_by_deadline_buckets(coordinator, clock) -> None:
    today = clock.today
    overdue = coordinator.create_task("overdue", "", "low", deadline=today - timedelta(days=1))
    due_today = coordinator.create_task("today", "", "low", deadline=today)
    due_tomorrow = coordinator.create_task("tmrw", "", "low", deadline=today + timedelta(days=1))
    later = coordinator.create_task("later", "", "low", deadline=today + timedelta(days=5))
    none = coordinator.create_task("none", "", "low")

    assert _ids(coordinator.filter_by_deadline("past-deadline")) == [overdue]
    assert _ids(coordinator.filter_by_deadline("today")) == [due_today]
    assert _ids(coordinator.filter_by_deadline("tomorrow")) == [due_tomorrow]
    assert _ids(coordinator.filter_by_deadline("after-tomorrow")) == [later]
    assert _ids(coordinator.filter_by_deadline("no-deadline")) == [none]

    with pytest.raises(InvalidDeadlineKeywordError):
        coordinator.filter_by_deadline("soon")


def test_real_stores_survive_reopen(settings, clock) -> None:
    first = build_coordinator(settings, now=clock, clock_ms=lambda: 42)
    task_id = first.create_task("Persist me", "", "medium")
    sub = first.create_subtask("child", "", "low", task_id)
    first.add_notes(sub, ["saved"])

    second = build_coordinator(settings, now=clock)
    assert second.get_task(task_id).name == "Persist me"
    assert second.open_subtask(sub).parent_id == task_id
    assert second.open_subtask(sub).notes == ["saved"]
    assert second.check_integrity() == []


# ---- the same coordinator over in-memory fakes ----


def test_relink_unlinked_subtask_links_directly(fake_coordinator, fake_parts) -> None:
    a = fake_coordinator.create_task("A", "", "low")
    sub = fake_coordinator.create_subtask("s", "", "low", a)
    fake_parts.links.unlink_subtask(sub)

    assert fake_coordinator.relink(sub, a) is None
    assert fake_parts.links.parent_of(sub) == a


def test_listing_skips_stale_ids_with_warning(fake_coordinator, fake_parts, caplog) -> None:
    a = fake_coordinator.create_task("A", "", "low")
    fake_parts.board.add("TASK-GHOST", Status.TO_DO)

    with caplog.at_level(logging.WARNING, logger="taskboard.core.coordinator"):
        groups = fake_coordinator.list_tasks("to-do")
        filtered = fake_coordinator.filter_by_priority("low")

    assert _ids(groups) == [a]
    assert _ids(filtered) == [a]
    assert "TASK-GHOST" in caplog.text


def test_interrupted_task_delete_rolls_forward(fake_coordinator, fake_parts) -> None:
    task_id = fake_coordinator.create_task("A", "", "low")
    s1 = fake_coordinator.create_subtask("s1", "", "low", task_id)
    s2 = fake_coordinator.create_subtask("s2", "", "low", task_id)
    fake_parts.subtasks.fail_delete.add(s1)

    with pytest.raises(StorageIOError):
        fake_coordinator.delete_task(task_id)
    assert fake_parts.tasks.exists(task_id)

    assert fake_coordinator.delete_task(task_id) == [s1, s2]
    assert fake_parts.tasks.items == {}
    assert fake_parts.subtasks.items == {}
    assert fake_parts.links.parents == {}
    assert all(lane == [] for lane in fake_parts.board.lanes.values())


def test_delete_finishes_when_task_record_is_already_gone(fake_coordinator, fake_parts) -> None:
    task_id = fake_coordinator.create_task("A", "", "low")
    s1 = fake_coordinator.create_subtask("s1", "", "low", task_id)
    fake_parts.tasks.fail_delete.add(task_id)

    with pytest.raises(StorageIOError):
        fake_coordinator.delete_task(task_id)
    # child is gone, parent record and link entry remain
    assert not fake_parts.subtasks.exists(s1)
    assert fake_parts.links.has_task(task_id)

    fake_coordinator.delete_task(task_id)
    assert not fake_parts.tasks.exists(task_id)
    assert not fake_parts.links.has_task(task_id)

    # nothing left to finish
    with pytest.raises(NotFoundError):
        fake_coordinator.delete_task(task_id)


def test_delete_subtask_rolls_forward_without_record(fake_coordinator, fake_parts) -> None:
    task_id = fake_coordinator.create_task("A", "", "low")
    sub = fake_coordinator.create_subtask("s", "", "low", task_id)
    del fake_parts.subtasks.items[sub]

    fake_coordinator.delete_subtask(sub)

    assert fake_parts.links.children_of(task_id) == []
    assert fake_parts.board.locate(sub) == []
    with pytest.raises(NotFoundError):
        fake_coordinator.delete_subtask(sub)


def test_delete_subtask_refuses_a_task_id(coordinator) -> None:
    task_id = coordinator.create_task("A", "", "low")
    coordinator.add_notes(task_id, ["keep me"])

    with pytest.raises(NotFoundError):
        coordinator.delete_subtask(task_id)

    assert coordinator.get_task(task_id).name == "A"
    assert _lane_count(coordinator, task_id, Status.TO_DO) == 1
    assert coordinator.open_task(task_id).notes == ["keep me"]
    assert coordinator.check_integrity() == []


def test_delete_task_refuses_a_subtask_id(coordinator) -> None:
    task_id = coordinator.create_task("A", "", "low")
    sub = coordinator.create_subtask("s", "", "low", task_id)

    with pytest.raises(NotFoundError):
        coordinator.delete_task(sub)

    assert coordinator.open_subtask(sub).parent_id == task_id
    assert _lane_count(coordinator, sub, Status.TO_DO) == 1
    assert coordinator.check_integrity() == []


def test_delete_rerun_drops_leftover_notes(fake_coordinator, fake_parts) -> None:
    task_id = fake_coordinator.create_task("A", "", "low")
    sub = fake_coordinator.create_subtask("s", "", "low", task_id)
    fake_coordinator.add_notes(task_id, ["task note"])
    fake_coordinator.add_notes(sub, ["sub note"])

    fake_parts.notes.fail_drop.add(sub)
    with pytest.raises(StorageIOError):
        fake_coordinator.delete_subtask(sub)
    assert fake_parts.links.children_of(task_id) == []
    fake_coordinator.delete_subtask(sub)
    assert fake_parts.notes.get_notes(sub) == []

    fake_parts.notes.fail_drop.add(task_id)
    with pytest.raises(StorageIOError):
        fake_coordinator.delete_task(task_id)
    assert not fake_parts.links.has_task(task_id)
    assert fake_coordinator.delete_task(task_id) == []
    assert fake_parts.notes.notes == {}

    with pytest.raises(NotFoundError):
        fake_coordinator.delete_task(task_id)


def test_check_integrity_reports_each_violation(fake_coordinator, fake_parts) -> None:
    a = fake_coordinator.create_task("A", "", "low")
    b = fake_coordinator.create_task("B", "", "low")
    s1 = fake_coordinator.create_subtask("s1", "", "low", a)
    s2 = fake_coordinator.create_subtask("s2", "", "low", a)
    assert fake_coordinator.check_integrity() == []

    fake_parts.board.lanes["to-do"].append("TASK-GHOST")
    fake_parts.board.lanes["blocked"].append(b)
    fake_parts.board.remove(s2, Status.TO_DO)
    fake_parts.links.parents[b] = [s1]
    fake_parts.links.parents["TASK-OLD"] = []
    fake_parts.links.unlink_subtask(s2)

    codes = Counter(issue.code for issue in fake_coordinator.check_integrity())
    assert codes == Counter(
        {
            "missing-record": 1,
            "status-mismatch": 1,
            "not-on-board": 1,
            "multiple-parents": 1,
            "missing-parent-record": 1,
            "unlinked-subtask": 1,
        }
    )
