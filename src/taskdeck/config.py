# src/taskdeck/config.py

"""
Settings from TASKDECK_* environment variables, with a local .env loaded first.

Components get the Settings object injected; only the entrypoint calls get_settings().
Malformed values fall back to the defaults instead of failing startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDECK_"

DEFAULT_DATA_DIR = Path(".local/taskdeck")
DEFAULT_SORT = "created-desc"
DEFAULT_PIN_HASH_ITERATIONS = 120_000
MIN_PIN_HASH_ITERATIONS = 10_000

_TRUE = frozenset({"1", "true", "yes", "y", "on"})

# Real environment variables win over .env.
load_dotenv(override=False)


class _Env:
    """Prefixed view over an environment mapping; blank values count as unset."""

    def __init__(self, environ: Mapping[str, str]) -> None:
        self._environ = environ

    def raw(self, suffix: str) -> str | None:
        value = self._environ.get(ENV_PREFIX + suffix)
        if value is None or not value.strip():
            return None
        return value.strip()

    def text(self, suffix: str, default: str) -> str:
        return self.raw(suffix) or default

    def flag(self, suffix: str, default: bool) -> bool:
        value = self.raw(suffix)
        return default if value is None else value.lower() in _TRUE

    def number(self, suffix: str, default: int) -> int:
        value = self.raw(suffix)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def path(self, suffix: str, default: Path) -> Path:
        value = self.raw(suffix)
        return default if value is None else Path(value).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    app_name: str
    log_level: str

    # Local, gitignored
    data_dir: Path
    storage_path: Path
    export_dir: Path

    default_sort: str
    pin_hash_iterations: int
    console_color: bool

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = _Env(os.environ if environ is None else environ)
        data_dir = env.path("DATA_DIR", DEFAULT_DATA_DIR)
        return cls(
            app_name=env.text("APP_NAME", "taskdeck"),
            log_level=env.text("LOG_LEVEL", "INFO").upper(),
            data_dir=data_dir,
            storage_path=env.path("STORAGE_PATH", data_dir / "storage.sqlite3"),
            export_dir=env.path("EXPORT_DIR", data_dir / "exports"),
            # Checked against SortKey when a board opens.
            default_sort=env.text("DEFAULT_SORT", DEFAULT_SORT).lower(),
            pin_hash_iterations=max(
                MIN_PIN_HASH_ITERATIONS, env.number("PIN_HASH_ITERATIONS", DEFAULT_PIN_HASH_ITERATIONS)
            ),
            console_color=env.flag("CONSOLE_COLOR", True),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
