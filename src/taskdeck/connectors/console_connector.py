# src/taskdeck/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

from ..cli.commands import registry as command_registry
from ..core.ports import NoticeLevel
from ..core.state import AppState
from ..tasks.task_api import BoardView
from ..tasks.task_filters import ALL
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

_RESET = "\033[0m"
_DIM = "\033[2m"
_RED = "\033[31m"
_BOLD = "\033[1m"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleNotifier:
    """Toast-style notifications as timestamped console lines."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def notify(self, message: str, level: NoticeLevel = "info") -> None:
        out = self._out or sys.stdout
        print(f"[{_ts_local()}] [{level.upper()}] {message}", file=out, flush=True)


class ConsolePresenter:
    """Renders a BoardView as a numbered list plus progress counts."""

    def __init__(self, out: TextIO | None = None, *, color: bool = True) -> None:
        self._out = out
        self._color = color

    def _paint(self, text: str, *codes: str) -> str:
        out = self._out or sys.stdout
        if not self._color or not getattr(out, "isatty", lambda: False)():
            return text
        return "".join(codes) + text + _RESET

    def format_task(self, position: int, task: Task, view: BoardView) -> str:
        mark = "x" if task.is_completed else " "
        parts = [f"{position:>3}. [{mark}] {task.title}", f"({task.priority.value})"]
        if task.due_date:
            parts.append(f"due {task.formatted_due_date()}")
        if task.group:
            parts.append(f"#{task.group}")
        overdue = task.is_overdue(view.today)
        if overdue:
            parts.append("OVERDUE")
        line = " ".join(parts)
        if task.is_completed:
            return self._paint(line, _DIM)
        if overdue:
            return self._paint(line, _RED)
        return line

    def format_view(self, view: BoardView) -> list[str]:
        s = view.stats
        spec = view.spec
        lines = [
            self._paint(
                f"Tasks: {s.total} | Completed: {s.completed} | Pending: {s.pending} | Progress: {s.percent}%",
                _BOLD,
            )
        ]

        if spec.is_default:
            lines.append(f"View: everything, sort={spec.sort.value}")
            return lines + self._rows(view)

        scope = [f"status={spec.status.value}", f"sort={spec.sort.value}"]
        if spec.today:
            scope.insert(0, "today")
        if spec.priority != ALL:
            scope.append(f"priority={spec.priority}")
        if spec.group != ALL:
            scope.append(f"group={spec.group}")
        if spec.search:
            scope.append(f"search={spec.search!r}")
        lines.append("View: " + ", ".join(scope))
        return lines + self._rows(view)

    def _rows(self, view: BoardView) -> list[str]:
        if not view.visible:
            # "No tasks at all" and "no matches" read differently.
            if view.has_tasks:
                return ["  No tasks match the current filters. Use /all to clear them."]
            return ["  No tasks yet. Add one with /add <title>."]
        return [self.format_task(i, task, view) for i, task in enumerate(view.visible, start=1)]

    def render(self, view: BoardView) -> None:
        out = self._out or sys.stdout
        print("\n".join(self.format_view(view)), file=out, flush=True)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "taskdeck"))
    _print_ts(f"[{app_name}] Use /help for commands. Use /exit to quit.\n")

    if state.board is None:
        _print_ts("Not logged in. Use /login <username> <pin> or /signup <username> <pin> <pin>.")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            who = state.board.user_id if state.board is not None else "guest"
            user_input = input(f"{who}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add.
            user_input = "/add " + user_input

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response:
            print(f"[{_ts_local()}] {cmd_response}")

    logger.info("Console connector finished.")
