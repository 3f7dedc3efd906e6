# src/taskboard/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from rich.console import RenderableType

from ..core.errors import TaskboardError
from ..core.ports import Prompter
from ..core.state import AppState
from ..tasks.task_models import ALL_SWIMLANES, DeadlineBucket, EntityKind, Priority, Status
from . import render

Reply = RenderableType  # plain str or a rich table/group
CommandHandler = Callable[[AppState, list[str], Prompter], Reply]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Verb-keyed command registry used by the console connector (add, move, show, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, tuple[str, str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        usage: str | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = (usage or key, help_text)
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, prompter: Prompter) -> Reply | None:
        """
        Handle a line like "move task TASK-01234 done".
        Returns the reply, or None for a blank line.
        """
        parts = line.split()
        if not parts:
            return None

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: {name}. Use help to list available commands."

        try:
            return handler(state, args, prompter)
        except TaskboardError as e:
            logger.info("Command %r failed: [%s] %s", name, e.kind, e)
            return f"[{e.kind}] {e.message}"

    def help_entries(self) -> list[tuple[str, str]]:
        return list(self._help.values())

    def build_help(self) -> RenderableType:
        return render.help_table(self.help_entries())


registry = CommandRegistry()


def _kind(args: list[str]) -> EntityKind | None:
    if not args:
        return None
    try:
        return EntityKind(args[0].lower())
    except ValueError:
        return None


def _usage(usage: str) -> str:
    return f"Usage: {usage}"


def _prompt_deadline(prompter: Prompter):
    if prompter.confirm("Set a deadline?"):
        return prompter.deadline("Deadline")
    return None


def _prompt_subtask(state: AppState, prompter: Prompter, parent_id: str) -> str:
    name = prompter.text("Subtask name:")
    description = prompter.text("Description:")
    priority = prompter.priority("Priority:")
    deadline = _prompt_deadline(prompter)
    return state.coordinator.create_subtask(name, description, priority, parent_id, deadline)


def _prompt_subtasks(state: AppState, prompter: Prompter, task_id: str) -> list[str]:
    created = []
    while prompter.confirm(f"Add a subtask to {task_id}?"):
        created.append(_prompt_subtask(state, prompter, task_id))
    return created


def _choose_parent(state: AppState, prompter: Prompter, exclude: str | None = None) -> str | None:
    candidates = [c for c in state.coordinator.parent_candidates() if c != exclude]
    if not candidates:
        return None
    return prompter.choose("Parent task:", candidates)


def cmd_help(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    return registry.build_help()


def cmd_exit(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    state.running = False
    return "Bye."


def cmd_add(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    """
    add task     -> prompt for a task, then optionally for its subtasks
    add subtask  -> prompt for a subtask and pick its parent
    """
    kind = _kind(args)
    coord = state.coordinator

    if kind is EntityKind.TASK:
        name = prompter.text("Task name:")
        description = prompter.text("Description:")
        priority = prompter.priority("Priority:")
        deadline = _prompt_deadline(prompter)
        task_id = coord.create_task(name, description, priority, deadline)

        created = _prompt_subtasks(state, prompter, task_id)
        if created:
            return f"Task {task_id} created with subtasks: {', '.join(created)}."
        return f"Task {task_id} created."

    if kind is EntityKind.SUBTASK:
        parent_id = _choose_parent(state, prompter)
        if parent_id is None:
            return "No open tasks to attach a subtask to. Use 'add task' first."
        subtask_id = _prompt_subtask(state, prompter, parent_id)
        return f"Subtask {subtask_id} created under {parent_id}."

    return _usage("add task | add subtask")


def cmd_edit(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    kind = _kind(args)
    if kind is None or len(args) < 2:
        return _usage("edit task <id> | edit subtask <id>")

    entity_id = args[1]
    coord = state.coordinator
    current = coord.get_task(entity_id) if kind is EntityKind.TASK else coord.get_subtask(entity_id)

    description = prompter.text("Description:", default=current.description)
    priority: Priority | None = None
    if prompter.confirm(f"Change priority (currently {current.priority})?"):
        priority = prompter.priority("Priority:")

    deadline = None
    clear_deadline = False
    if prompter.confirm(f"Change deadline (currently {current.deadline or 'none'})?"):
        if current.deadline is not None and prompter.confirm("Remove the deadline?"):
            clear_deadline = True
        else:
            deadline = prompter.deadline("Deadline")

    coord.edit(
        entity_id,
        kind,
        description=description,
        priority=priority,
        deadline=deadline,
        clear_deadline=clear_deadline,
    )
    reply = f"Updated {entity_id}."

    if kind is EntityKind.SUBTASK and prompter.confirm("Link to a different parent task?"):
        previous = coord.open_subtask(entity_id).parent_id
        new_parent = _choose_parent(state, prompter, exclude=previous)
        if new_parent is None:
            return f"{reply} No other open task to link to."
        coord.relink(entity_id, new_parent)
        reply = f"{reply} Now linked to {new_parent}."

    if kind is EntityKind.TASK:
        created = _prompt_subtasks(state, prompter, entity_id)
        if created:
            reply = f"{reply} Added subtasks: {', '.join(created)}."

    return reply


def cmd_open(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    kind = _kind(args)
    if kind is None or len(args) < 2:
        return _usage("open task <id> | open subtask <id>")
    if kind is EntityKind.TASK:
        return render.task_details(state.coordinator.open_task(args[1]))
    return render.subtask_details(state.coordinator.open_subtask(args[1]))


def cmd_delete(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    kind = _kind(args)
    if kind is None or len(args) < 2:
        return _usage("delete task <id> | delete subtask <id>")

    entity_id = args[1]
    coord = state.coordinator

    if kind is EntityKind.SUBTASK:
        if not prompter.confirm(f"Delete subtask {entity_id}?"):
            return "Cancelled."
        coord.delete_subtask(entity_id)
        return f"Deleted subtask {entity_id}."

    if not prompter.confirm(f"Delete task {entity_id} and all of its subtasks?"):
        return "Cancelled."
    children = coord.delete_task(entity_id)
    if children:
        return f"Deleted task {entity_id} and {len(children)} subtask(s): {', '.join(children)}."
    return f"Deleted task {entity_id}."


def cmd_move(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    kind = _kind(args)
    if kind is None or len(args) < 3:
        lanes = " | ".join(s.value for s in Status)
        return _usage(f"move task|subtask <id> <{lanes}>")
    item = state.coordinator.move(args[1], kind, args[2])
    return f"Moved {item.id} to {item.status.label}."


def cmd_link(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    if _kind(args) is not EntityKind.SUBTASK or len(args) < 2:
        return _usage("link subtask <id>")

    subtask_id = args[1]
    coord = state.coordinator
    current = coord.open_subtask(subtask_id).parent_id
    new_parent = _choose_parent(state, prompter, exclude=current)
    if new_parent is None:
        return "No other open task to link to."

    previous = coord.relink(subtask_id, new_parent)
    if previous:
        return f"Linked {subtask_id} to {new_parent} (was {previous})."
    return f"Linked {subtask_id} to {new_parent}."


def cmd_show(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    """
    show task [lane|all]     -> tasks per swimlane with their subtask count
    show subtask [lane|all]  -> subtasks per swimlane with their parent
    """
    kind = _kind(args)
    if kind is None:
        return _usage(f"show task|subtask [{ALL_SWIMLANES} | <swimlane>]")
    lane = args[1] if len(args) > 1 else ALL_SWIMLANES
    if kind is EntityKind.TASK:
        groups = state.coordinator.list_tasks(lane)
    else:
        groups = state.coordinator.list_subtasks(lane)
    return render.swimlane_tables(groups, kind)


def cmd_filter(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    """
    filter due <past-deadline|today|tomorrow|after-tomorrow|no-deadline>
    filter priority <high|medium|low>
    """
    if len(args) < 2 or args[0].lower() not in ("due", "priority"):
        dues = "|".join(b.value for b in DeadlineBucket)
        prios = "|".join(p.value.lower() for p in Priority)
        return _usage(f"filter due <{dues}> | filter priority <{prios}>")

    keyword = args[1]
    if args[0].lower() == "due":
        groups = state.coordinator.filter_by_deadline(keyword)
        return render.filter_table(f"deadline '{keyword.lower()}'", groups)

    groups = state.coordinator.filter_by_priority(keyword)
    return render.filter_table(f"priority '{keyword.lower()}'", groups)


def cmd_note(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    """
    note <id> <text...>  -> append one note
    note <id>            -> prompt for notes until a blank line
    """
    if not args:
        return _usage("note <id> [text...]")

    entity_id = args[0]
    if len(args) > 1:
        notes = [" ".join(args[1:])]
    else:
        notes = []
        while True:
            line = prompter.text("Note (blank to finish):", default="")
            if not line.strip():
                break
            notes.append(line)
        if not notes:
            return "No notes added."

    saved = state.coordinator.add_notes(entity_id, notes)
    return f"{entity_id} now has {len(saved)} note(s)."


def cmd_check(state: AppState, args: list[str], prompter: Prompter) -> Reply:
    return render.integrity_table(state.coordinator.check_integrity())


registry.register(
    "add",
    cmd_add,
    help_text="Create a task (and its subtasks) or a subtask.",
    usage="add task | add subtask",
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit description, priority or deadline.",
    usage="edit task|subtask <id>",
)
registry.register(
    "open",
    cmd_open,
    help_text="Show all fields and notes of an item.",
    usage="open task|subtask <id>",
)
registry.register(
    "delete",
    cmd_delete,
    help_text="Delete an item (a task takes its subtasks).",
    usage="delete task|subtask <id>",
    aliases=["rm"],
)
registry.register(
    "move",
    cmd_move,
    help_text="Move an item to another swimlane.",
    usage="move task|subtask <id> <swimlane>",
    aliases=["mv"],
)
registry.register(
    "link", cmd_link, help_text="Attach a subtask to a different task.", usage="link subtask <id>"
)
registry.register(
    "show",
    cmd_show,
    help_text="List tasks or subtasks per swimlane.",
    usage="show task|subtask [all|<swimlane>]",
    aliases=["ls"],
)
registry.register(
    "filter",
    cmd_filter,
    help_text="Active items by deadline or priority.",
    usage="filter due|priority <keyword>",
)
registry.register(
    "note", cmd_note, help_text="Append notes to a task or subtask.", usage="note <id> [text...]"
)
registry.register("check", cmd_check, help_text="Report inconsistencies between the stores.")
registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("exit", cmd_exit, help_text="Leave the board.", aliases=["quit", "q"])
