# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .coordinator import Coordinator


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    coordinator: Coordinator

    running: bool = True
