# src/taskdeck/cli/main.py

"""
CLI entrypoint.

Logging first, then AppState, then the previous session (if still logged in),
then the console REPL in the main thread.
"""

from __future__ import annotations

import locale
import logging

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import PersistenceError
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state, resume_session

logger = logging.getLogger(__name__)


def _console_level(name: object) -> int:
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=_console_level(settings.log_level))
    logger.info("Starting %s (log file %s)", settings.app_name, log_file)

    try:
        # Title sorting collates with the user's locale.
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("Unsupported locale in environment; title sort falls back to accent-folded order.")

    try:
        state = create_initial_state(settings=settings)
    except PersistenceError:
        logger.exception("Cannot open local storage at %s", settings.storage_path)
        raise SystemExit(1) from None

    resume_session(state)

    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
