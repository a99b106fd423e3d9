# src/supa_todos/cli/main.py

"""
CLI entrypoint.

Loads settings, initializes logging, builds AppState, mounts the view and runs the
console REPL. Everything runs on one event loop owned by an asyncio.Runner.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..cli.bootstrap import create_initial_state, shutdown
from ..config import ConfigError, load_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    settings = load_settings()

    console_level = getattr(logging, settings.log_level, logging.WARNING)
    if not isinstance(console_level, int):
        console_level = logging.WARNING
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    with asyncio.Runner() as runner:
        try:
            state = runner.run(create_initial_state(settings))
        except ConfigError as e:
            logger.error("Configuration error: %s", e)
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2

        try:
            runner.run(state.view.mount())
            runner.run(run_console_loop(state))
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down...")
        finally:
            runner.run(shutdown(state))

    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
