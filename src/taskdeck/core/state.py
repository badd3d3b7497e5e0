# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..auth.user_store import UserStore
from ..storage.local_store import LocalStore
from ..tasks.task_api import TaskBoard
from .ports import Notifier, Presenter


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    store: LocalStore
    users: UserStore
    notifier: Notifier
    presenter: Presenter

    # Exactly one board per logged-in session; None while logged out.
    board: TaskBoard | None = None
