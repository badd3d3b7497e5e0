# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, accounts and the console presentation into AppState,
- opens the TaskBoard of whoever is logged in.
"""

from __future__ import annotations

import logging

from ..auth.user_store import UserStore
from ..config import get_settings
from ..core.ports import Notifier, Presenter
from ..core.state import AppState
from ..storage.local_store import LocalStore
from ..tasks.task_api import TaskBoard

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    notifier: Notifier | None = None,
    presenter: Presenter | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(). Console presentation is the default.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if notifier is None or presenter is None:
        from ..connectors.console_connector import ConsoleNotifier, ConsolePresenter

        notifier = notifier or ConsoleNotifier()
        presenter = presenter or ConsolePresenter(color=bool(getattr(settings, "console_color", True)))

    store = LocalStore(settings.storage_path)
    users = UserStore(store, pin_hash_iterations=int(getattr(settings, "pin_hash_iterations", 120_000)))

    state = AppState(
        settings=settings,
        store=store,
        users=users,
        notifier=notifier,
        presenter=presenter,
    )
    return state


def open_board(state: AppState, user_id: str) -> TaskBoard:
    """Load `user_id`'s tasks into a fresh board (replaces any previous session board)."""
    state.board = TaskBoard.open(
        state.users,
        user_id,
        presenter=state.presenter,
        notifier=state.notifier,
        groups=state.users,
        default_sort=getattr(state.settings, "default_sort", "created-desc"),
    )
    logger.info("Session opened user=%s tasks=%d", user_id, len(state.board.collection))
    return state.board


def close_board(state: AppState) -> None:
    state.board = None


def resume_session(state: AppState) -> TaskBoard | None:
    """Reopen the board of the user still logged in from a previous run (best-effort)."""
    try:
        user = state.users.current_user()
    except Exception:
        logger.exception("Failed to read session; starting logged out.")
        return None
    if not user:
        return None
    return open_board(state, user)
