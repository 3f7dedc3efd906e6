# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "taskboard.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_MAX_LOG_BYTES = 1_000_000
_LOG_BACKUPS = 3


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the board prompt readable:
    - per-write store logs (taskboard.store.*) only at WARNING+
    - other taskboard loggers at whatever level the handler allows
    - everything else, captured 'py.warnings' included, only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("taskboard.store."):
            return record.levelno >= logging.WARNING
        if name == "taskboard" or name.startswith("taskboard."):
            return True
        return record.levelno >= logging.ERROR


def level_from_name(name: str | None, default: int = logging.WARNING) -> int:
    """Map "debug", "INFO", ... to a logging level; unknown names give `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send records to stderr (filtered) and to a rotating `<log_dir>/taskboard.log`.

    Call once at startup; a second call replaces the root handlers.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.DEBUG)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    logfile = RotatingFileHandler(
        log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
    )
    logfile.setLevel(file_level)

    for handler in (console, logfile):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)

    logging.getLogger(__name__).debug(
        "Logging to %s (console level %s)", log_file, logging.getLevelName(console_level)
    )
    return log_file
