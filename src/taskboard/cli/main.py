# src/taskboard/cli/main.py

"""
CLI entrypoint.

Loads settings, initializes logging, opens the board data and runs the
console REPL until `exit`, EOF or Ctrl-C.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import TaskboardError
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    try:
        log_file = setup_logging(
            log_dir=settings.log_dir, console_level=level_from_name(settings.log_level)
        )
    except OSError as e:
        print(f"Cannot create log directory {settings.log_dir}: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting %s (log file: %s)", settings.app_name, log_file)

    # A board we cannot open or read is the only fatal error.
    try:
        state = create_initial_state(settings=settings)
    except TaskboardError as e:
        logger.error("Cannot open board data in %s: [%s] %s", settings.data_dir, e.kind, e)
        sys.exit(1)

    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
