# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskdeck.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskdeck.tasks.task_collection", logging.DEBUG, True),
        ("taskdeck.connectors.console_connector", logging.INFO, False),
        ("taskdeck.connectors.console_connector", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("sqlite_helper", logging.WARNING, False),
        ("sqlite_helper", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_twice_keeps_one_pair_of_handlers(tmp_path: Path) -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        setup_logging(log_dir=tmp_path / "logs")
        ours = [h for h in root.handlers if h not in before]
        assert len(ours) == 2

        logging.getLogger("taskdeck.test").debug("hello file")
        for h in ours:
            h.flush()
        assert log_file.name == "taskdeck.log"
        assert "hello file" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
                h.close()
        logging.captureWarnings(False)
