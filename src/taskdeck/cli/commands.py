# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, cast

from ..core.errors import AuthError, PersistenceError
from ..core.state import AppState
from ..tasks.task_api import TaskBoard
from ..tasks.task_collection import UPDATABLE_FIELDS
from ..tasks.task_export import FORMATS, default_export_path, export_tasks
from ..tasks.task_filters import ALL, SortKey
from ..tasks.task_models import Priority, parse_due_date
from .bootstrap import close_board, open_board

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except AuthError as e:
            return str(e)
        except PersistenceError:
            logger.exception("Storage failure in /%s", name)
            return "Storage error; changes are kept in memory for this session."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

_NOT_LOGGED_IN = "Not logged in. Use /login <username> <pin>."
_ASSIGN_RE = re.compile(r"(\w+)=(.*?)(?=\s+\w+=|$)")
_EDIT_KEYS = {"due": "due_date", "done": "is_completed", "completed": "is_completed"}


def _board(state: AppState) -> TaskBoard | None:
    return state.board


def _parse_day(raw: str, today: date) -> date | None:
    text = raw.strip().lower()
    if text == "today":
        return today
    if text == "tomorrow":
        return today + timedelta(days=1)
    if text == "yesterday":
        return today - timedelta(days=1)
    return parse_due_date(text)


def _position_to_id(board: TaskBoard, raw: str) -> str | None:
    try:
        return board.task_id_at(int(raw))
    except ValueError:
        return None


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "y", "on", "x", "done"}


# ---- session ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_signup(state: AppState, args: list[str]) -> str:
    """/signup <username> <pin> <pin>"""
    if len(args) != 3:
        return "Usage: /signup <username> <pin> <confirm-pin>"
    username = state.users.sign_up(args[0], args[1], args[2])
    open_board(state, username)
    return f"Account created! Logged in as {username}."


def cmd_login(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /login <username> <pin>"
    username = state.users.login(args[0], args[1])
    open_board(state, username)
    return f"Welcome back, {username}!"


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.board is None:
        return "Already logged out."
    state.users.logout()
    close_board(state)
    return "Logged out."


# ---- task intents ----


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title words> [!high|!medium|!low] [@YYYY-MM-DD|@today|@tomorrow] [#group]
    """
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN

    title_words: list[str] = []
    priority = "Medium"
    due: date | None = None
    group = ""
    for tok in args:
        if tok.startswith("!") and len(tok) > 1:
            priority = tok[1:]
        elif tok.startswith("@") and len(tok) > 1:
            due = _parse_day(tok[1:], board.today())
            if due is None:
                return f"Invalid due date: {tok[1:]} (use YYYY-MM-DD, today or tomorrow)."
        elif tok.startswith("#") and len(tok) > 1:
            group = tok[1:]
        else:
            title_words.append(tok)

    board.create_task(" ".join(title_words), priority=priority, due_date=due, group=group)
    return ""


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <n> title=... priority=... due=YYYY-MM-DD|none group=... done=yes|no"""
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    if len(args) < 2:
        return "Usage: /edit <n> title=... priority=... due=... group=... done=..."

    task_id = _position_to_id(board, args[0])
    if task_id is None:
        return f"No task #{args[0]} in the current view."

    fields: dict[str, Any] = {}
    for m in _ASSIGN_RE.finditer(" ".join(args[1:])):
        key = _EDIT_KEYS.get(m.group(1).lower(), m.group(1).lower())
        value: Any = m.group(2).strip()
        if key == "due_date":
            if value.lower() in ("", "none", "-"):
                value = None
            else:
                parsed = _parse_day(value, board.today())
                if parsed is None:
                    return f"Invalid due date: {value}"
                value = parsed
        elif key == "is_completed":
            value = _parse_bool(value)
        elif key == "priority":
            # Case-insensitive on the command line; anything else is left for the store to reject.
            value = Priority.parse(value) or value
        fields[key] = value

    if not fields:
        return f"Nothing to change. Fields: {', '.join(UPDATABLE_FIELDS)} (due=, done= also work)."

    result = board.edit_task(task_id, fields)
    if not result.found:
        return "Task no longer exists."
    if result.rejected:
        return f"Updated: {', '.join(result.applied) or 'nothing'}. Rejected: {', '.join(result.rejected)}."
    return "Task updated."


def cmd_done(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    if len(args) != 1:
        return "Usage: /done <n>"
    task_id = _position_to_id(board, args[0])
    if task_id is None:
        return f"No task #{args[0]} in the current view."
    board.toggle_task(task_id)
    return ""


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    if len(args) != 1:
        return "Usage: /rm <n>"
    task_id = _position_to_id(board, args[0])
    if task_id is None:
        return f"No task #{args[0]} in the current view."
    task = board.collection.get(task_id)
    if emit is not None and task is not None:
        emit(f"Deleting: {task.title}")
    board.delete_task(task_id)
    return ""


def cmd_move(state: AppState, args: list[str]) -> str:
    """/move <n> <m|end>: place task n right before task m (or at the end)."""
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    if len(args) != 2:
        return "Usage: /move <n> <m|end>"
    task_id = _position_to_id(board, args[0])
    if task_id is None:
        return f"No task #{args[0]} in the current view."

    target_id: str | None = None
    if args[1].lower() != "end":
        target_id = _position_to_id(board, args[1])
        if target_id is None:
            return f"No task #{args[1]} in the current view."

    board.reorder_task(task_id, target_id)
    if board.spec.sort is not SortKey.MANUAL:
        return "Moved. Use /sort manual to see your own order."
    return ""


# ---- filters ----


def _set_filter(state: AppState, **partial: Any) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    try:
        board.set_filter(**partial)
    except ValueError as e:
        return str(e)
    return ""


def cmd_status(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /status all|active|completed"
    return _set_filter(state, status=args[0])


def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /priority all|high|medium|low"
    return _set_filter(state, priority=args[0])


def cmd_group(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    name = " ".join(args).strip()
    board.filter_by_group(None if not name or name.lower() == ALL else name)
    return ""


def cmd_search(state: AppState, args: list[str]) -> str:
    return _set_filter(state, search=" ".join(args))


def cmd_sort(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /sort " + "|".join(k.value for k in SortKey)
    return _set_filter(state, sort=args[0])


def cmd_today(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    board.show_today()
    return ""


def cmd_all(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    board.show_all()
    return ""


def cmd_list(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    board.refresh()
    return ""


def cmd_stats(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    s = board.view.stats
    return f"Total: {s.total}\nCompleted: {s.completed}\nPending: {s.pending}\nProgress: {s.percent}%"


# ---- groups ----


def cmd_groups(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    groups = board.groups()
    if not groups:
        return "No groups yet. Use /addgroup <name>."
    return "Groups:\n" + "\n".join(f"  #{g}" for g in groups)


def cmd_addgroup(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    board.add_group(" ".join(args))
    return ""


def cmd_rmgroup(state: AppState, args: list[str]) -> str:
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN
    board.remove_group(" ".join(args).strip())
    return ""


# ---- export ----


def cmd_export(state: AppState, args: list[str]) -> str:
    """/export [txt|md] [path]"""
    board = _board(state)
    if board is None:
        return _NOT_LOGGED_IN

    fmt = "txt"
    rest = list(args)
    if rest and rest[0].lower() in FORMATS:
        fmt = rest.pop(0).lower()
    if rest:
        path = " ".join(rest)
    else:
        path = default_export_path(state.settings.export_dir, board.user_id, fmt)

    tasks = board.export_source()
    try:
        written = export_tasks(tasks, path, username=board.user_id, fmt=fmt)
    except OSError as e:
        logger.exception("Export failed path=%s", path)
        return f"Export failed: {e}"
    return f"Exported {len(tasks)} tasks to {written}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("signup", cmd_signup, help_text="Create an account: /signup <user> <pin> <pin>.")
registry.register("login", cmd_login, help_text="Log in: /login <user> <pin>.")
registry.register("logout", cmd_logout, help_text="Log out.")
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [!high|!low] [@date|@today] [#group].", aliases=["a"]
)
registry.register("edit", cmd_edit, help_text="Edit: /edit <n> title=.. priority=.. due=.. group=.. done=..")
registry.register("done", cmd_done, help_text="Toggle completion of task <n>.", aliases=["x", "toggle"])
registry.register("rm", cmd_rm, help_text="Delete task <n>.", aliases=["del", "delete"])
registry.register("move", cmd_move, help_text="Reorder: /move <n> <m|end> (n goes right before m).")
registry.register("status", cmd_status, help_text="Status filter: all | active | completed.")
registry.register("priority", cmd_priority, help_text="Priority filter: all | high | medium | low.")
registry.register("group", cmd_group, help_text="Group filter: /group <name> | /group all.")
registry.register("search", cmd_search, help_text="Title search (empty clears): /search <text>.", aliases=["s"])
registry.register("sort", cmd_sort, help_text="Sort: created-desc | due-date-asc | due-date-desc | priority-desc | title-asc | manual.")
registry.register("today", cmd_today, help_text="Only tasks due today (status filter resets to all).")
registry.register("all", cmd_all, help_text="Clear every filter (sort is kept).")
registry.register("list", cmd_list, help_text="Show the current view again.", aliases=["ls"])
registry.register("stats", cmd_stats, help_text="Totals and completion percentage.")
registry.register("groups", cmd_groups, help_text="List your groups.")
registry.register("addgroup", cmd_addgroup, help_text="Create a group: /addgroup <name>.")
registry.register("rmgroup", cmd_rmgroup, help_text="Remove a group (tasks keep their label).")
registry.register("export", cmd_export, help_text="Export the view: /export [txt|md] [path].")
