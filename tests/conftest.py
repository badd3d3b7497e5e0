# tests/conftest.py

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_initial_state
from taskdeck.core.state import AppState
from taskdeck.tasks.task_models import Priority, Task

from .fakes import FakeNotifier, FakePresenter, FakeTaskRepo

TODAY = date(2026, 10, 18)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        data_dir=data_dir,
        storage_path=data_dir / "storage.sqlite3",
        export_dir=data_dir / "exports",
        default_sort="created-desc",
        # Low on purpose: hashing cost is not what these tests check.
        pin_hash_iterations=1_000,
        console_color=False,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def presenter() -> FakePresenter:
    return FakePresenter()


@pytest.fixture()
def repo() -> FakeTaskRepo:
    return FakeTaskRepo()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: FakeNotifier, presenter: FakePresenter) -> AppState:
    """
    AppState wired with fake presentation.

    NOTE: We keep the real SQLite LocalStore/UserStore here because
    their correctness is part of what we want to test.
    """
    return create_initial_state(settings=settings, notifier=notifier, presenter=presenter)


def make_task(
    title: str,
    *,
    priority: Priority = Priority.MEDIUM,
    due: date | None = None,
    group: str = "",
    done: bool = False,
    created: int = 0,
) -> Task:
    """Task with a deterministic id and created_at (`created` = minutes after a fixed epoch)."""
    ts = datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=created)
    return Task(
        id=f"t-{title}",
        title=title,
        priority=priority,
        due_date=due,
        group=group,
        is_completed=done,
        created_at=ts,
        updated_at=ts,
    )
