# src/taskdeck/tasks/task_filters.py

"""
Filter & sort engine.

Pure functions over a read-only sequence of tasks:

    visible = sort_tasks(apply_filters(tasks, spec, today=...), spec.sort)

Nothing here mutates a task or keeps state between calls, so the same spec over
the same tasks always yields the same list.
"""

from __future__ import annotations

import dataclasses
import locale
import unicodedata
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any

from .task_models import Priority, Task

ALL = "all"


class StatusScope(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: object) -> StatusScope:
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"unknown status scope: {raw!r}") from None


class SortKey(StrEnum):
    CREATED_DESC = "created-desc"
    DUE_DATE_ASC = "due-date-asc"
    DUE_DATE_DESC = "due-date-desc"
    PRIORITY_DESC = "priority-desc"
    TITLE_ASC = "title-asc"
    MANUAL = "manual"

    @classmethod
    def parse(cls, raw: object) -> SortKey:
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        text = _SORT_ALIASES.get(text, text)
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"unknown sort key: {raw!r}") from None


# Short names accepted from the command line and older stored settings.
_SORT_ALIASES = {
    "created": "created-desc",
    "priority": "priority-desc",
    "title": "title-asc",
    "due": "due-date-asc",
}


def _parse_priority_scope(raw: object) -> str:
    if isinstance(raw, str) and raw.strip().lower() == ALL:
        return ALL
    p = Priority.parse(raw)
    if p is None:
        raise ValueError(f"unknown priority scope: {raw!r}")
    return p.value


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """
    Active filter/sort choices. Not persisted.

    priority and group hold either ALL or the exact value to match.
    """

    status: StatusScope = StatusScope.ALL
    priority: str = ALL
    group: str = ALL
    search: str = ""
    today: bool = False
    sort: SortKey = SortKey.CREATED_DESC

    def merged(self, partial: Mapping[str, Any]) -> FilterSpec:
        """Return a copy with the given keys replaced; raises ValueError on bad input."""
        changes: dict[str, Any] = {}
        for key, value in partial.items():
            if key == "status":
                changes[key] = StatusScope.parse(value)
            elif key == "priority":
                changes[key] = _parse_priority_scope(value)
            elif key == "group":
                changes[key] = ALL if value is None else str(value)
            elif key == "search":
                changes[key] = "" if value is None else str(value)
            elif key == "today":
                changes[key] = bool(value)
            elif key == "sort":
                changes[key] = SortKey.parse(value)
            else:
                raise ValueError(f"unknown filter key: {key!r}")
        return dataclasses.replace(self, **changes)

    @property
    def is_default(self) -> bool:
        return (
            self.status is StatusScope.ALL
            and self.priority == ALL
            and self.group == ALL
            and not self.search
            and not self.today
        )


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    percent: int


def _matches(task: Task, spec: FilterSpec, needle: str, today: date) -> bool:
    if spec.today and not task.is_due_today(today):
        return False
    if spec.status is StatusScope.ACTIVE and task.is_completed:
        return False
    if spec.status is StatusScope.COMPLETED and not task.is_completed:
        return False
    if spec.priority != ALL and task.priority.value != spec.priority:
        return False
    if spec.group != ALL and task.group != spec.group:
        return False
    if needle and needle not in task.title.casefold():
        return False
    return True


def apply_filters(tasks: Iterable[Task], spec: FilterSpec, *, today: date | None = None) -> list[Task]:
    """All active conditions ANDed; keeps the input order."""
    needle = spec.search.strip().casefold()
    day = today or date.today()
    return [t for t in tasks if _matches(t, spec, needle, day)]


def _fold(text: str) -> str:
    """Casefolded with accents stripped: "Éclair" -> "eclair"."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _title_key_func() -> Callable[[Task], tuple[str, ...]]:
    # Under the C/POSIX collation strxfrm is a plain codepoint compare.
    current = locale.setlocale(locale.LC_COLLATE)
    if current in ("C", "POSIX") or current.startswith("C."):
        return lambda t: (_fold(t.title), t.title)
    return lambda t: (locale.strxfrm(t.title.casefold()), _fold(t.title), t.title)


def sort_tasks(tasks: Iterable[Task], key: SortKey | str = SortKey.CREATED_DESC) -> list[Task]:
    """Stable sort; ties keep their incoming (manual) order."""
    key = SortKey.parse(key)
    items = list(tasks)

    if key is SortKey.MANUAL:
        return items

    if key is SortKey.CREATED_DESC:
        return sorted(items, key=lambda t: t.created_at, reverse=True)

    if key in (SortKey.DUE_DATE_ASC, SortKey.DUE_DATE_DESC):
        dated = [t for t in items if t.due_date is not None]
        undated = [t for t in items if t.due_date is None]
        dated.sort(key=lambda t: t.due_date, reverse=key is SortKey.DUE_DATE_DESC)
        # No due date -> always last, whatever the direction.
        return dated + undated

    if key is SortKey.PRIORITY_DESC:
        return sorted(items, key=lambda t: t.priority.rank, reverse=True)

    return sorted(items, key=_title_key_func())


def visible_subset(tasks: Sequence[Task], spec: FilterSpec, *, today: date | None = None) -> list[Task]:
    return sort_tasks(apply_filters(tasks, spec, today=today), spec.sort)


def compute_stats(tasks: Sequence[Task]) -> TaskStats:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.is_completed)
    percent = (completed * 200 + total) // (2 * total) if total else 0
    return TaskStats(total=total, completed=completed, pending=total - completed, percent=percent)
