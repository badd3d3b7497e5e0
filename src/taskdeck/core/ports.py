# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and presentation swappable and makes testing easier.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from ..tasks.task_api import BoardView

TaskRecord = dict[str, Any]
# Plain structural task record: {"id", "title", "isCompleted", "priority", "dueDate", ...}.

NoticeLevel = Literal["info", "success", "warning", "error"]


class TaskRepo(Protocol):
    """
    Session-scoped persistence adapter.

    load raises PersistenceError when storage cannot be read;
    save reports failure through its return value.
    """

    def load_tasks_for_user(self, user_id: str) -> list[TaskRecord]: ...
    def save_tasks_for_user(self, user_id: str, records: Sequence[TaskRecord]) -> bool: ...


class GroupRegistry(Protocol):
    """User-scoped list of group names (only used to populate choices)."""

    def groups(self, user_id: str) -> list[str]: ...
    def add_group(self, user_id: str, name: str) -> list[str]: ...
    def remove_group(self, user_id: str, name: str) -> list[str]: ...


class Notifier(Protocol):
    """Non-fatal, user-visible notifications (toast-style)."""

    def notify(self, message: str, level: NoticeLevel = "info") -> None: ...


class Presenter(Protocol):
    """Renders a freshly derived board view."""

    def render(self, view: BoardView) -> None: ...
