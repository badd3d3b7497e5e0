# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from taskdeck.config import Settings


def test_defaults() -> None:
    s = Settings.from_env({})
    assert s.app_name == "taskdeck"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/taskdeck")
    assert s.storage_path == Path(".local/taskdeck/storage.sqlite3")
    assert s.export_dir == Path(".local/taskdeck/exports")
    assert s.default_sort == "created-desc"
    assert s.pin_hash_iterations == 120_000
    assert s.console_color is True


def test_overrides(tmp_path: Path) -> None:
    s = Settings.from_env(
        {
            "TASKDECK_DATA_DIR": str(tmp_path),
            "TASKDECK_LOG_LEVEL": "debug",
            "TASKDECK_DEFAULT_SORT": " Priority-Desc ",
            "TASKDECK_CONSOLE_COLOR": "no",
            "TASKDECK_PIN_HASH_ITERATIONS": "200000",
        }
    )
    assert s.storage_path == tmp_path / "storage.sqlite3"
    assert s.export_dir == tmp_path / "exports"
    assert s.log_level == "DEBUG"
    assert s.default_sort == "priority-desc"
    assert s.console_color is False
    assert s.pin_hash_iterations == 200_000


def test_blank_and_malformed_values_fall_back() -> None:
    s = Settings.from_env({"TASKDECK_APP_NAME": "  ", "TASKDECK_PIN_HASH_ITERATIONS": "lots"})
    assert s.app_name == "taskdeck"
    assert s.pin_hash_iterations == 120_000


def test_iterations_have_a_floor() -> None:
    assert Settings.from_env({"TASKDECK_PIN_HASH_ITERATIONS": "5"}).pin_hash_iterations == 10_000


def test_unprefixed_names_are_ignored() -> None:
    assert Settings.from_env({"APP_NAME": "other"}).app_name == "taskdeck"
