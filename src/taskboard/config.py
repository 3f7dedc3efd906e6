# src/taskboard/config.py

"""Settings for the board, read from TASKBOARD_* environment variables (+ optional .env).

- One frozen Settings object per process (see get_settings()).
- Every on-disk location derives from TASKBOARD_DATA_DIR unless set on its own.
- Blank or malformed values fall back to the defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

DEFAULT_DATA_DIR = Path("~/.taskboard")
DEFAULT_PROMPT = "boards> "
DEFAULT_ID_DIGITS = 5


def _k(suffix: str) -> str:
    """TASKBOARD_<suffix>"""
    return f"{ENV_PREFIX}_{suffix}"


def _raw(suffix: str) -> str | None:
    value = os.getenv(_k(suffix))
    if value is None or value.strip() == "":
        return None
    return value


def _env_str(suffix: str, default: str) -> str:
    value = _raw(suffix)
    return default if value is None else value.strip()


def _env_int(suffix: str, default: int, *, minimum: int | None = None) -> int:
    value = _raw(suffix)
    try:
        number = default if value is None else int(value)
    except ValueError:
        number = default
    if minimum is not None:
        number = max(minimum, number)
    return number


def _env_path(suffix: str, default: Path) -> Path:
    value = _raw(suffix)
    return default if value is None else Path(value.strip()).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    prompt: str

    # ---- Board files ----
    data_dir: Path
    tasks_dir: Path
    subtasks_dir: Path
    board_path: Path
    links_path: Path
    notes_path: Path
    log_dir: Path

    # ---- Ids ----
    id_digits: int

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path("DATA_DIR", DEFAULT_DATA_DIR.expanduser())

        return Settings(
            app_name=_env_str("APP_NAME", "taskboard"),
            log_level=_env_str("LOG_LEVEL", "WARNING"),
            # The prompt keeps its trailing space, so it is read unstripped.
            prompt=_raw("PROMPT") or DEFAULT_PROMPT,
            data_dir=data_dir,
            tasks_dir=_env_path("TASKS_DIR", data_dir / "tasks"),
            subtasks_dir=_env_path("SUBTASKS_DIR", data_dir / "subtasks"),
            board_path=_env_path("BOARD_PATH", data_dir / "boards.json"),
            links_path=_env_path("LINKS_PATH", data_dir / "tasks_link.json"),
            notes_path=_env_path("NOTES_PATH", data_dir / "notes.json"),
            log_dir=_env_path("LOG_DIR", data_dir / "logs"),
            id_digits=_env_int("ID_DIGITS", DEFAULT_ID_DIGITS, minimum=1),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (real environment variables win) and build the settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
