# tests/test_console_connector.py

from __future__ import annotations

import io
from datetime import timedelta

from taskdeck.connectors.console_connector import ConsoleNotifier, ConsolePresenter
from taskdeck.tasks.task_api import BoardView
from taskdeck.tasks.task_filters import FilterSpec, StatusScope, compute_stats
from taskdeck.tasks.task_models import Priority

from .conftest import TODAY, make_task


def _view(tasks, *, visible=None, spec=None) -> BoardView:
    return BoardView(
        visible=tuple(tasks if visible is None else visible),
        stats=compute_stats(tasks),
        has_tasks=bool(tasks),
        spec=spec or FilterSpec(),
        today=TODAY,
    )


def test_format_view_lists_tasks_with_markers() -> None:
    tasks = [
        make_task("late", priority=Priority.HIGH, due=TODAY - timedelta(days=1), group="Work"),
        make_task("done", done=True),
    ]
    lines = ConsolePresenter(color=False).format_view(_view(tasks))

    assert lines[0] == "Tasks: 2 | Completed: 1 | Pending: 1 | Progress: 50%"
    assert lines[1] == "View: everything, sort=created-desc"
    assert lines[2] == "  1. [ ] late (High) due Oct 17, 2026 #Work OVERDUE"
    assert lines[3] == "  2. [x] done (Medium)"


def test_format_view_empty_states() -> None:
    presenter = ConsolePresenter(color=False)
    assert presenter.format_view(_view([]))[-1].strip().startswith("No tasks yet")

    spec = FilterSpec(status=StatusScope.COMPLETED, search="zzz", today=True)
    lines = presenter.format_view(_view([make_task("a")], visible=[], spec=spec))
    assert lines[1] == "View: today, status=completed, sort=created-desc, search='zzz'"
    assert lines[-1].strip() == "No tasks match the current filters. Use /all to clear them."


def test_no_color_when_not_a_tty() -> None:
    out = io.StringIO()
    ConsolePresenter(out, color=True).render(_view([make_task("a")]))
    assert "\033[" not in out.getvalue()
    assert "1. [ ] a (Medium)" in out.getvalue()


def test_notifier_prints_level() -> None:
    out = io.StringIO()
    ConsoleNotifier(out).notify("Task added successfully!", "success")
    assert out.getvalue().rstrip().endswith("[SUCCESS] Task added successfully!")
