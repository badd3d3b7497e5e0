# src/taskdeck/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from ..core.ports import GroupRegistry, NoticeLevel, Notifier, Presenter, TaskRepo
from .task_collection import TaskCollection, UpdateResult
from .task_filters import ALL, FilterSpec, SortKey, StatusScope, TaskStats, compute_stats, visible_subset
from .task_models import Priority, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoardView:
    """What the presentation layer gets after every recomputation."""

    visible: tuple[Task, ...]
    stats: TaskStats
    has_tasks: bool
    spec: FilterSpec
    groups: tuple[str, ...] = ()
    today: date | None = None


class TaskBoard:
    """
    Session controller for one logged-in user.

    Owns the user's TaskCollection and the current FilterSpec. Each intent mutates
    one of them and then calls refresh(), which re-derives the visible subset and
    hands a BoardView to the presenter.

    Navigation policies live here, not in the filter engine:
    - show_today(): today filter on AND status reset to All
    - show_all():   every filter back to All, search cleared, sort kept
    """

    def __init__(
        self,
        collection: TaskCollection,
        *,
        presenter: Presenter | None = None,
        notifier: Notifier | None = None,
        groups: GroupRegistry | None = None,
        spec: FilterSpec | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.collection = collection
        self.presenter = presenter
        self.notifier = notifier
        self.group_registry = groups
        self.spec = spec or FilterSpec()
        self._clock = clock
        self._view: BoardView | None = None

    @classmethod
    def open(
        cls,
        repo: TaskRepo,
        user_id: str,
        *,
        presenter: Presenter | None = None,
        notifier: Notifier | None = None,
        groups: GroupRegistry | None = None,
        default_sort: SortKey | str = SortKey.CREATED_DESC,
        clock: Callable[[], date] = date.today,
    ) -> TaskBoard:
        """Load the user's collection and render the first view."""
        collection = TaskCollection.load(repo, user_id, notifier=notifier)
        try:
            sort = SortKey.parse(default_sort)
        except ValueError:
            logger.warning("Unknown default sort %r; using created-desc", default_sort)
            sort = SortKey.CREATED_DESC
        board = cls(
            collection,
            presenter=presenter,
            notifier=notifier,
            groups=groups,
            spec=FilterSpec(sort=sort),
            clock=clock,
        )
        board.refresh()
        return board

    @property
    def user_id(self) -> str:
        return self.collection.user_id

    def today(self) -> date:
        """The board's notion of "today" (local date unless a clock was injected)."""
        return self._clock()

    @property
    def view(self) -> BoardView:
        if self._view is None:
            return self.refresh(render=False)
        return self._view

    # ---- plumbing ----

    def _notify(self, message: str, level: NoticeLevel = "info") -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message, level)
        except Exception:
            logger.debug("Notifier failed.", exc_info=True)

    def groups(self) -> list[str]:
        if self.group_registry is None:
            return []
        try:
            return self.group_registry.groups(self.user_id)
        except Exception:
            logger.exception("Group registry read failed user=%s", self.user_id)
            return []

    def refresh(self, *, render: bool = True) -> BoardView:
        today = self.today()
        tasks = self.collection.tasks
        view = BoardView(
            visible=tuple(visible_subset(tasks, self.spec, today=today)),
            stats=compute_stats(tasks),
            has_tasks=bool(tasks),
            spec=self.spec,
            groups=tuple(self.groups()),
            today=today,
        )
        self._view = view
        if render and self.presenter is not None:
            try:
                self.presenter.render(view)
            except Exception:
                logger.exception("Presenter failed to render.")
        return view

    def task_id_at(self, position: int) -> str | None:
        """1-based position in the last rendered view -> task id."""
        visible = self.view.visible
        if 1 <= position <= len(visible):
            return visible[position - 1].id
        return None

    # ---- intents ----

    def create_task(
        self,
        title: str,
        priority: Priority | str = Priority.MEDIUM,
        due_date: date | str | None = None,
        group: str | None = "",
    ) -> Task | None:
        if not (title or "").strip():
            self._notify("Task title is required!", "error")
            return None
        parsed = Priority.parse(priority)
        if parsed is None:
            self._notify("Please select a priority!", "error")
            return None

        task = Task.create(title, priority=parsed, due_date=due_date, group=group)
        self.collection.add(task)
        logger.info("Task created id=%s total=%d", task.id, len(self.collection))
        self.refresh()
        self._notify("Task added successfully!", "success")
        return task

    def edit_task(self, task_id: str, fields: Mapping[str, Any]) -> UpdateResult:
        result = self.collection.update(task_id, fields)
        if result.rejected:
            self._notify(f"Invalid value for: {', '.join(result.rejected)}", "error")
        self.refresh()
        return result

    def delete_task(self, task_id: str) -> bool:
        removed = self.collection.remove(task_id)
        self.refresh()
        if removed:
            self._notify("Task deleted successfully!", "success")
        return removed

    def toggle_task(self, task_id: str) -> bool:
        toggled = self.collection.toggle_completion(task_id)
        self.refresh()
        return toggled

    def reorder_task(self, task_id: str, target_id: str | None = None) -> bool:
        moved = self.collection.reorder(task_id, target_id)
        self.refresh()
        return moved

    def set_filter(self, **partial: Any) -> FilterSpec:
        """Raises ValueError (spec unchanged) if any key or value is invalid."""
        self.spec = self.spec.merged(partial)
        self.refresh()
        return self.spec

    def show_today(self) -> FilterSpec:
        self.spec = self.spec.merged({"today": True, "status": StatusScope.ALL})
        self.refresh()
        self._notify("Showing today's tasks", "info")
        return self.spec

    def show_all(self) -> FilterSpec:
        self.spec = FilterSpec(sort=self.spec.sort)
        self.refresh()
        return self.spec

    def filter_by_group(self, name: str | None) -> FilterSpec:
        return self.set_filter(group=name if name else ALL)

    def add_group(self, name: str) -> list[str]:
        """Raises AuthError when the registry refuses the name."""
        if self.group_registry is None:
            return []
        groups = self.group_registry.add_group(self.user_id, name)
        self.refresh()
        self._notify("Group added successfully!", "success")
        return groups

    def remove_group(self, name: str) -> list[str]:
        """Forget a group name; tasks keep it and simply stop matching a live group."""
        if self.group_registry is None:
            return []
        groups = self.group_registry.remove_group(self.user_id, name)
        if self.spec.group == name:
            self.spec = self.spec.merged({"group": ALL})
        self.refresh()
        self._notify("Group removed successfully!", "success")
        return groups

    def export_source(self) -> Sequence[Task]:
        """Tasks an export/print should contain: the visible subset, else everything."""
        visible = self.view.visible
        return visible if visible else self.collection.tasks
