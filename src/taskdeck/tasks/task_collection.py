# src/taskdeck/tasks/task_collection.py

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..core.errors import PersistenceError
from ..core.ports import NoticeLevel, Notifier, TaskRepo
from .task_models import Task

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "priority", "due_date", "group", "is_completed")


@dataclass(frozen=True, slots=True)
class UpdateResult:
    found: bool
    applied: tuple[str, ...] = ()
    rejected: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.found and not self.rejected


@dataclass(slots=True)
class TaskCollection:
    """
    Ordered task list of one user; the only place tasks are mutated.

    Order is the manual order (head = most recently added unless reordered).
    Every successful mutation saves the full list through the repo. A failed save
    is reported through the notifier; the in-memory list stays authoritative.

    Missing ids are never an error: the operation is a logged no-op returning False.
    """

    user_id: str
    repo: TaskRepo
    notifier: Notifier | None = None
    _tasks: list[Task] = field(default_factory=list)

    @classmethod
    def load(cls, repo: TaskRepo, user_id: str, *, notifier: Notifier | None = None) -> TaskCollection:
        coll = cls(user_id=user_id, repo=repo, notifier=notifier)
        try:
            records = repo.load_tasks_for_user(user_id)
        except PersistenceError:
            logger.exception("Failed to load tasks user=%s; starting empty", user_id)
            coll._notify("Error loading tasks!", "error")
            return coll

        seen: set[str] = set()
        for rec in records:
            task = Task.from_record(rec)
            if task is None:
                continue
            if task.id in seen:
                logger.warning("Dropping duplicate task id=%s user=%s", task.id, user_id)
                continue
            seen.add(task.id)
            coll._tasks.append(task)

        logger.info("Loaded %d tasks user=%s", len(coll._tasks), user_id)
        return coll

    # ---- queries ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    def index_of(self, task_id: object) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def get(self, task_id: str) -> Task | None:
        idx = self.index_of(task_id)
        return None if idx is None else self._tasks[idx]

    # ---- persistence ----

    def _notify(self, message: str, level: NoticeLevel) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message, level)
        except Exception:
            logger.debug("Notifier failed.", exc_info=True)

    def save(self) -> bool:
        records = [t.to_record() for t in self._tasks]
        try:
            ok = self.repo.save_tasks_for_user(self.user_id, records)
        except Exception:
            logger.exception("save_tasks_for_user crashed user=%s", self.user_id)
            ok = False
        if not ok:
            logger.error("Tasks not persisted user=%s count=%d", self.user_id, len(records))
            self._notify("Error saving tasks!", "error")
        return ok

    # ---- mutations ----

    def add(self, task: Task) -> bool:
        if self.index_of(task.id) is not None:
            logger.warning("add ignored: duplicate task id=%s", task.id)
            return False
        self._tasks.insert(0, task)
        logger.debug("Task added id=%s total=%d", task.id, len(self._tasks))
        self.save()
        return True

    def update(self, task_id: str, fields: Mapping[str, Any]) -> UpdateResult:
        """
        Apply only the fields present in `fields`, each with its own rule.

        title/priority may be rejected (task keeps the old value); due_date, group
        and is_completed are unconditional. Unknown keys are rejected.
        """
        task = self.get(task_id)
        if task is None:
            logger.debug("update: task id=%s not found", task_id)
            return UpdateResult(found=False)

        applied: list[str] = []
        rejected: list[str] = []

        for name, value in fields.items():
            if name == "title":
                ok = task.update_title(value)
            elif name == "priority":
                ok = task.update_priority(value)
            elif name == "due_date":
                task.update_due_date(value)
                ok = True
            elif name == "group":
                task.update_group(value)
                ok = True
            elif name == "is_completed":
                task.set_completed(bool(value))
                ok = True
            else:
                ok = False
            (applied if ok else rejected).append(name)

        if rejected:
            logger.info("update id=%s rejected fields=%s", task_id, rejected)
        if applied:
            self.save()
        return UpdateResult(found=True, applied=tuple(applied), rejected=tuple(rejected))

    def remove(self, task_id: str) -> bool:
        idx = self.index_of(task_id)
        if idx is None:
            logger.debug("remove: task id=%s not found", task_id)
            return False
        del self._tasks[idx]
        self.save()
        return True

    def toggle_completion(self, task_id: str) -> bool:
        task = self.get(task_id)
        if task is None:
            logger.debug("toggle: task id=%s not found", task_id)
            return False
        task.toggle_completion()
        self.save()
        return True

    def reorder(self, task_id: str, before_task_id: str | None = None) -> bool:
        """
        Move a task immediately before `before_task_id`, or to the end when no
        usable reference is given (None, unknown id, or the task itself).
        """
        idx = self.index_of(task_id)
        if idx is None:
            logger.debug("reorder: task id=%s not found", task_id)
            return False

        before = self._tasks[:]
        task = self._tasks.pop(idx)

        target = None if before_task_id == task_id else before_task_id
        target_idx = self.index_of(target) if target is not None else None
        if target_idx is None:
            self._tasks.append(task)
        else:
            self._tasks.insert(target_idx, task)

        if self._tasks == before:
            return True
        self.save()
        return True
