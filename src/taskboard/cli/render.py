# src/taskboard/cli/render.py

"""
rich renderables for command replies.

Handlers return either a plain string or one of these; the console
connector prints whatever it gets through a rich Console.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from rich.console import Group
from rich.table import Table
from rich.text import Text

from ..core.coordinator import BoardRow, IntegrityIssue, SubtaskDetails, SwimlaneGroup, TaskDetails
from ..tasks.task_models import EntityKind, Priority, Task

_PRIORITY_STYLE = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


def _fmt_date(value: date | None) -> str:
    return value.isoformat() if value is not None else "-"


def _fmt_dt(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


def _priority(value: Priority) -> Text:
    return Text(value.value, style=_PRIORITY_STYLE.get(value, ""))


def _links_cell(row: BoardRow) -> str:
    if row.kind is EntityKind.TASK:
        return str(row.child_count or 0)
    return row.parent_id or "-"


def swimlane_tables(groups: Sequence[SwimlaneGroup], kind: EntityKind) -> Group:
    """One table per swimlane, as listed by `show task|subtask <lane>`."""
    links_header = "Subtasks" if kind is EntityKind.TASK else "Parent Task"
    tables = []
    for group in groups:
        table = Table(title=f"{group.status.label} ({len(group.rows)})", title_justify="left")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Priority")
        table.add_column("Deadline")
        table.add_column(links_header)
        for row in group.rows:
            item = row.item
            table.add_row(
                item.id,
                Text(item.name),
                _priority(item.priority),
                _fmt_date(item.deadline),
                _links_cell(row),
            )
        tables.append(table)
    return Group(*tables)


def filter_table(title: str, groups: Sequence[SwimlaneGroup]) -> Table | str:
    """Filter results mix tasks and subtasks, so the last column depends on the row."""
    if not any(group.rows for group in groups):
        return f"No active tasks or subtasks match {title}."

    table = Table(title=title, title_justify="left")
    table.add_column("Swimlane")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Priority")
    table.add_column("Deadline")
    table.add_column("Subtasks / Parent")
    for group in groups:
        for row in group.rows:
            item = row.item
            table.add_row(
                group.status.label,
                item.id,
                Text(item.name),
                _priority(item.priority),
                _fmt_date(item.deadline),
                _links_cell(row),
            )
    return table


def _record_table(item: Task) -> Table:
    table = Table(
        title=f"{item.KIND.value.title()} {item.id}", show_header=False, title_justify="left"
    )
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", Text(item.name))
    table.add_row("Description", Text(item.description))
    table.add_row("Priority", _priority(item.priority))
    table.add_row("Status", item.status.label)
    table.add_row("Added on", _fmt_dt(item.added_on))
    table.add_row("Started on", _fmt_dt(item.started_on))
    table.add_row("Deadline", _fmt_date(item.deadline))
    table.add_row("Completed on", _fmt_dt(item.completed_on))
    return table


def _notes_text(notes: Sequence[str]) -> Text:
    if not notes:
        return Text("No notes.", style="dim")
    text = Text("Notes:\n", style="bold")
    for i, note in enumerate(notes, start=1):
        text.append(f"  {i}. {note}\n")
    return text


def task_details(details: TaskDetails) -> Group:
    table = _record_table(details.task)
    subtasks = ", ".join(details.subtask_ids) if details.subtask_ids else "-"
    table.add_row("Subtasks", subtasks)
    return Group(table, _notes_text(details.notes))


def subtask_details(details: SubtaskDetails) -> Group:
    table = _record_table(details.subtask)
    table.add_row("Parent Task", details.parent_id or "-")
    return Group(table, _notes_text(details.notes))


def help_table(entries: Sequence[tuple[str, str]]) -> Table:
    table = Table(title="Available commands", title_justify="left")
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description")
    for usage, help_text in entries:
        table.add_row(Text(usage), Text(help_text))
    return table


def integrity_table(issues: Sequence[IntegrityIssue]) -> Table | str:
    if not issues:
        return "Board, records and links are consistent."
    table = Table(title=f"Integrity issues ({len(issues)})", title_justify="left")
    table.add_column("Issue", style="red")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Detail")
    for issue in issues:
        table.add_row(issue.code, issue.entity_id, Text(issue.detail))
    return table
