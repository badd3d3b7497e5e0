# tests/test_export.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from taskdeck.tasks.task_export import default_export_path, export_tasks, render_markdown, render_text
from taskdeck.tasks.task_models import Priority

from .conftest import TODAY, make_task

WHEN = datetime(2026, 10, 18, 9, 30)


def test_render_text_lists_every_task() -> None:
    tasks = [
        make_task("Write report", priority=Priority.HIGH, due=TODAY, group="Work"),
        make_task("Buy milk", done=True),
    ]
    text = render_text(tasks, username="alice", generated_at=WHEN)

    assert text.splitlines()[:2] == ["Task List - alice", "Generated on 2026-10-18 09:30"]
    assert "1. [ ] Write report" in text
    assert "   Priority: High | Status: Pending" in text
    assert "   Group: Work" in text
    assert "   Due: Oct 18, 2026" in text
    assert "2. [x] Buy milk" in text
    assert "Status: Completed" in text


def test_render_text_empty() -> None:
    assert "(no tasks)" in render_text([], username="alice", generated_at=WHEN)


def test_render_markdown_escapes_pipes() -> None:
    md = render_markdown([make_task("a|b", group="G")], username="alice", generated_at=WHEN)
    assert "| 1 |   | a\\|b | Medium | G |  |" in md
    assert md.startswith("# Task List - alice\n")


@pytest.mark.parametrize("fmt", ["txt", "md"])
def test_export_writes_file(tmp_path: Path, fmt: str) -> None:
    target = tmp_path / "out" / f"list.{fmt}"
    result = export_tasks([make_task("a")], target, username="alice", fmt=fmt)
    assert result == target
    assert "a" in target.read_text("utf-8")
    assert list(target.parent.iterdir()) == [target]


def test_export_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        export_tasks([], tmp_path / "x.pdf", username="alice", fmt="pdf")


def test_default_export_path_sanitizes_username(tmp_path: Path) -> None:
    p = default_export_path(tmp_path, "a/b c", "md")
    assert p.parent == tmp_path
    assert p.name.startswith("tasks-a_b_c-")
    assert p.suffix == ".md"
