# src/taskdeck/tasks/task_export.py

"""Printable listings of tasks (plain text and Markdown)."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .task_models import Task

logger = logging.getLogger(__name__)

FORMATS = ("txt", "md")


def _status(task: Task) -> str:
    return "Completed" if task.is_completed else "Pending"


def render_text(tasks: Sequence[Task], *, username: str, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now().astimezone()
    lines = [
        f"Task List - {username}",
        f"Generated on {generated_at.strftime('%Y-%m-%d %H:%M')}",
        "",
    ]
    if not tasks:
        lines.append("(no tasks)")
    for i, t in enumerate(tasks, start=1):
        mark = "x" if t.is_completed else " "
        lines.append(f"{i}. [{mark}] {t.title}")
        lines.append(f"   Priority: {t.priority.value} | Status: {_status(t)}")
        if t.group:
            lines.append(f"   Group: {t.group}")
        if t.due_date:
            lines.append(f"   Due: {t.formatted_due_date()}")
    return "\n".join(lines) + "\n"


def _md_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(tasks: Sequence[Task], *, username: str, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now().astimezone()
    lines = [
        f"# Task List - {_md_cell(username)}",
        "",
        f"_Generated on {generated_at.strftime('%Y-%m-%d %H:%M')}_",
        "",
        "| # | Done | Title | Priority | Group | Due |",
        "|---|---|---|---|---|---|",
    ]
    for i, t in enumerate(tasks, start=1):
        lines.append(
            f"| {i} | {'x' if t.is_completed else ' '} | {_md_cell(t.title)} | {t.priority.value} "
            f"| {_md_cell(t.group)} | {t.due_date.isoformat() if t.due_date else ''} |"
        )
    return "\n".join(lines) + "\n"


def export_tasks(tasks: Sequence[Task], path: str | Path, *, username: str, fmt: str = "txt") -> Path:
    """Write the listing to `path` atomically and return the final path."""
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise ValueError(f"unknown export format: {fmt!r}")

    content = render_markdown(tasks, username=username) if fmt == "md" else render_text(tasks, username=username)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(content, "utf-8")
    os.replace(tmp, path)
    logger.info("Exported %d tasks to %s", len(tasks), path)
    return path


def default_export_path(export_dir: str | Path, username: str, fmt: str = "txt") -> Path:
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in username) or "user"
    return Path(export_dir) / f"tasks-{safe}-{stamp}.{fmt}"
