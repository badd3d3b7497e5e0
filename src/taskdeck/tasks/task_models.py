# src/taskdeck/tasks/task_models.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class Priority(StrEnum):
    """
    Task priority.

    Values are the exact strings used in stored records ("High", "Medium", "Low").
    """

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, raw: object, *, strict: bool = False) -> Priority | None:
        """
        Return the matching Priority or None for anything else.

        strict=True accepts only the exact stored values; otherwise case and
        surrounding whitespace are ignored (user input).
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        if strict:
            try:
                return cls(raw)
            except ValueError:
                return None
        wanted = raw.strip().lower()
        for p in cls:
            if p.value.lower() == wanted:
                return p
        return None


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_task_id() -> str:
    return f"task_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def parse_due_date(raw: object) -> date | None:
    """
    Accept a date, a datetime or an ISO string ("YYYY-MM-DD" or a full timestamp).

    The whole string must parse; anything else is None.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=UTC)
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        # Browser-style "...Z" suffix is accepted by fromisoformat since 3.11.
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


@dataclass(slots=True, eq=False)
class Task:
    """
    One user-created work item.

    Identity is `id`; two tasks with the same fields are still two tasks.
    """

    id: str
    title: str
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None
    group: str = ""
    is_completed: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        title: str,
        priority: Priority | str = Priority.MEDIUM,
        due_date: date | str | None = None,
        group: str | None = "",
    ) -> Task:
        """
        Build a fresh, not completed task.

        The caller validates that the title is non-empty; here it is only trimmed.
        An unknown priority falls back to Medium.
        """
        now = _utcnow()
        return cls(
            id=new_task_id(),
            title=(title or "").strip(),
            priority=Priority.parse(priority, strict=True) or Priority.MEDIUM,
            due_date=parse_due_date(due_date),
            group=group or "",
            created_at=now,
            updated_at=now,
        )

    # ---- mutation ----

    def _touch(self) -> None:
        self.updated_at = _utcnow()

    def toggle_completion(self) -> None:
        self.is_completed = not self.is_completed
        self._touch()

    def set_completed(self, flag: bool) -> None:
        self.is_completed = bool(flag)
        self._touch()

    def update_title(self, new_title: object) -> bool:
        if not isinstance(new_title, str) or not new_title.strip():
            return False
        self.title = new_title.strip()
        self._touch()
        return True

    def update_priority(self, new_priority: object) -> bool:
        parsed = Priority.parse(new_priority, strict=True)
        if parsed is None:
            return False
        self.priority = parsed
        self._touch()
        return True

    def update_due_date(self, new_date: date | str | None) -> None:
        self.due_date = parse_due_date(new_date)
        self._touch()

    def update_group(self, new_group: str | None) -> None:
        self.group = new_group or ""
        self._touch()

    # ---- derived ----

    def is_overdue(self, today: date | None = None) -> bool:
        if self.due_date is None or self.is_completed:
            return False
        return self.due_date < (today or date.today())

    def is_due_today(self, today: date | None = None) -> bool:
        return self.due_date is not None and self.due_date == (today or date.today())

    def formatted_due_date(self) -> str | None:
        if self.due_date is None:
            return None
        d = self.due_date
        return f"{d.strftime('%b')} {d.day}, {d.year}"

    # ---- serialization ----

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "isCompleted": self.is_completed,
            "priority": self.priority.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "group": self.group,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: object) -> Task | None:
        """
        Rebuild a task from a stored record.

        id and timestamps are taken verbatim; title/priority/dueDate/group go through
        the same path as creation. Returns None for records that cannot be a task
        (not a mapping, blank title). A stored priority outside High/Medium/Low is
        normalized to Medium.
        """
        if not isinstance(record, Mapping):
            logger.warning("Skipping task record of type %s", type(record).__name__)
            return None

        raw_title = record.get("title")
        if not isinstance(raw_title, str) or not raw_title.strip():
            logger.warning("Skipping task record id=%s with empty title", record.get("id"))
            return None

        raw_priority = record.get("priority")
        priority = Priority.parse(raw_priority, strict=True)
        if priority is None:
            logger.warning(
                "Task record id=%s has invalid priority %r; using Medium",
                record.get("id"),
                raw_priority,
            )
            priority = Priority.MEDIUM

        task = cls.create(
            raw_title,
            priority=priority,
            due_date=record.get("dueDate"),
            group=record.get("group") if isinstance(record.get("group"), str) else "",
        )

        raw_id = record.get("id")
        if isinstance(raw_id, str) and raw_id.strip():
            task.id = raw_id
        else:
            logger.warning("Task record without id; assigned %s", task.id)

        raw_done = record.get("isCompleted", False)
        if not isinstance(raw_done, bool):
            logger.warning("Task record id=%s has non-boolean isCompleted %r; using False", task.id, raw_done)
        task.is_completed = raw_done is True

        created = _parse_timestamp(record.get("createdAt"))
        updated = _parse_timestamp(record.get("updatedAt"))
        if created is not None:
            task.created_at = created
        if updated is not None:
            task.updated_at = updated
        elif created is not None:
            task.updated_at = created
        return task
