# src/taskboard/tasks/task_ids.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.errors import IdSpaceExhaustedError
from .task_models import EntityKind

logger = logging.getLogger(__name__)

DEFAULT_ID_DIGITS = 5


class IdGenerator:
    """
    Short, human-typeable ids: "TASK-01234", "SUBTASK-56789".

    The numeric part is the tail of the current Unix time in milliseconds.
    Two entities created within the same millisecond (or 10^digits ms apart)
    would collide, so the caller passes `taken` and the number is bumped
    until a free id is found.
    """

    def __init__(
        self,
        *,
        digits: int = DEFAULT_ID_DIGITS,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        if digits < 1:
            raise ValueError("digits must be >= 1")
        self._digits = digits
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)

    def _format(self, kind: EntityKind, number: int) -> str:
        return f"{kind.id_prefix}-{number:0{self._digits}d}"

    def next_id(self, kind: EntityKind, taken: Callable[[str], bool] | None = None) -> str:
        modulo = 10**self._digits
        number = int(self._clock_ms()) % modulo
        candidate = self._format(kind, number)
        if taken is None:
            return candidate

        for _ in range(modulo):
            if not taken(candidate):
                return candidate
            logger.debug("Id %s already taken, bumping", candidate)
            number = (number + 1) % modulo
            candidate = self._format(kind, number)

        raise IdSpaceExhaustedError(
            f"No free {kind} id left with {self._digits} digits",
            {"kind": str(kind), "digits": self._digits},
        )
