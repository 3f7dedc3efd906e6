# src/taskboard/cli/prompts.py

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date

from ..tasks.task_models import Priority

_YES = {"y", "yes", "1", "true", "on"}
_NO = {"n", "no", "0", "false", "off"}


class ConsolePrompter:
    """
    Line-based prompts on top of input().

    Every method loops until it gets a valid answer, so callers receive
    already-validated values. EOF/Ctrl-C propagate to the REPL.
    """

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        print_fn: Callable[[str], None] = print,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._input = input_fn
        self._print = print_fn
        self._today = today

    def text(self, message: str, default: str | None = None) -> str:
        suffix = f" [{default}]" if default else ""
        while True:
            answer = self._input(f"{message}{suffix} ").strip()
            if answer:
                return answer
            if default is not None:
                return default
            self._print("A value is required.")

    def confirm(self, message: str, help_text: str | None = None) -> bool:
        if help_text:
            self._print(help_text)
        while True:
            answer = self._input(f"{message} (y/n) ").strip().lower()
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            self._print("Please answer y or n.")

    def choose(self, message: str, options: Sequence[str]) -> str:
        if not options:
            raise ValueError("nothing to choose from")
        self._print(message)
        for i, opt in enumerate(options, start=1):
            self._print(f"  {i}) {opt}")
        while True:
            answer = self._input("> ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            if answer in options:
                return answer
            self._print(f"Pick a number between 1 and {len(options)}.")

    def priority(self, message: str) -> Priority:
        return Priority(self.choose(message, [p.value for p in Priority]))

    def deadline(self, message: str) -> date:
        while True:
            raw = self._input(f"{message} (YYYY-MM-DD) ").strip()
            try:
                value = date.fromisoformat(raw)
            except ValueError:
                self._print("Use the YYYY-MM-DD format.")
                continue
            if value < self._today():
                self._print("The deadline cannot be in the past.")
                continue
            return value
