# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

from rich.console import Console

from ..cli.commands import registry as command_registry
from ..cli.prompts import ConsolePrompter
from ..core.ports import Prompter
from ..core.state import AppState

logger = logging.getLogger(__name__)


def run_console_loop(
    state: AppState,
    *,
    prompter: Prompter | None = None,
    console: Console | None = None,
    input_fn: Callable[[str], str] = input,
) -> None:
    console = console or Console()
    prompter = prompter or ConsolePrompter(
        input_fn=input_fn, print_fn=functools.partial(console.print, markup=False)
    )
    prompt = str(getattr(state.settings, "prompt", "boards> "))

    logger.info("Console connector started (prompt=%r).", prompt)
    console.print("Type 'help' to list commands, 'exit' to quit.")

    while state.running:
        try:
            user_input = input_fn(prompt).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            console.print()
            break

        if not user_input:
            continue

        try:
            reply = command_registry.handle(state, user_input, prompter)
        except KeyboardInterrupt:
            console.print()
            reply = "Cancelled."
        except EOFError:
            logger.info("Console EOF received while prompting, exiting.")
            break
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        # Plain replies carry user text and "[Kind]" prefixes, not rich markup.
        if isinstance(reply, str):
            console.print(reply, markup=False, highlight=False)
        elif reply is not None:
            console.print(reply)

    logger.info("Console connector finished.")
