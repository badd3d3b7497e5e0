# src/taskdeck/auth/user_store.py

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from collections.abc import Sequence
from typing import Any

from ..core.errors import AuthError, PersistenceError
from ..core.ports import TaskRecord
from ..storage.local_store import LocalStore

logger = logging.getLogger(__name__)

USERS_KEY = "users"
SESSION_KEY = "session"
TASKS_KEY_PREFIX = "tasks:"

MIN_USERNAME_LEN = 3
PIN_MIN_LEN = 4
PIN_MAX_LEN = 6


def _user_key(username: str) -> str:
    return username.strip().casefold()


def tasks_key(user_id: str) -> str:
    return f"{TASKS_KEY_PREFIX}{_user_key(user_id)}"


def hash_pin(pin: str, salt: bytes, iterations: int) -> str:
    return hashlib.pbkdf2_hmac("sha256", pin.encode("utf-8"), salt, iterations).hex()


class UserStore:
    """
    Accounts, login session, groups and per-user task lists on top of LocalStore.

    Stored layout:
    - "users":          [{"username", "pinHash", "salt", "iterations", "groups"}]
    - "session":        {"username": str | None, "isLoggedIn": bool}
    - "tasks:<user>":   [task record, ...]

    PINs are salted PBKDF2-SHA256 hashes. Records written by older versions with a
    plaintext "pin" are accepted once and rewritten hashed on successful login.

    Also the task persistence adapter (load_tasks_for_user / save_tasks_for_user)
    and the group registry used by the session controller.
    """

    def __init__(self, store: LocalStore, *, pin_hash_iterations: int = 120_000) -> None:
        self._store = store
        self._iterations = int(pin_hash_iterations)

    # ---- users ----

    def _load_users(self) -> list[dict[str, Any]]:
        data = self._store.get_json(USERS_KEY, default=[])
        if not isinstance(data, list):
            logger.warning("Users entry is not a list; treating as empty")
            return []
        return [u for u in data if isinstance(u, dict) and isinstance(u.get("username"), str)]

    def _save_users(self, users: list[dict[str, Any]]) -> None:
        self._store.set_json(USERS_KEY, users)

    @staticmethod
    def _find(users: list[dict[str, Any]], username: str) -> dict[str, Any] | None:
        wanted = _user_key(username)
        for u in users:
            if _user_key(u["username"]) == wanted:
                return u
        return None

    def _make_secret(self, pin: str) -> dict[str, Any]:
        salt = secrets.token_bytes(16)
        return {
            "pinHash": hash_pin(pin, salt, self._iterations),
            "salt": salt.hex(),
            "iterations": self._iterations,
        }

    @staticmethod
    def _check_pin(user: dict[str, Any], pin: str) -> bool:
        stored_hash = user.get("pinHash")
        if isinstance(stored_hash, str):
            try:
                salt = bytes.fromhex(str(user.get("salt", "")))
                iterations = int(user.get("iterations", 0))
            except (TypeError, ValueError):
                return False
            if iterations <= 0:
                return False
            return hmac.compare_digest(hash_pin(pin, salt, iterations), stored_hash)

        legacy = user.get("pin")
        if isinstance(legacy, str):
            return hmac.compare_digest(legacy.encode("utf-8"), pin.encode("utf-8"))
        return False

    def sign_up(self, username: str, pin: str, confirm: str | None = None) -> str:
        """Create an account and log it in. Returns the stored username."""
        username = (username or "").strip()
        pin = (pin or "").strip()
        if confirm is not None and pin != confirm.strip():
            raise AuthError("PINs do not match")
        if len(username) < MIN_USERNAME_LEN:
            raise AuthError("Username too short")
        if not (PIN_MIN_LEN <= len(pin) <= PIN_MAX_LEN) or not pin.isdigit():
            raise AuthError(f"PIN must be {PIN_MIN_LEN}-{PIN_MAX_LEN} digits")

        users = self._load_users()
        if self._find(users, username) is not None:
            raise AuthError("Username already exists")

        users.append({"username": username, "groups": [], **self._make_secret(pin)})
        self._save_users(users)
        logger.info("User created username=%s", username)
        return self.login(username, pin)

    def login(self, username: str, pin: str) -> str:
        username = (username or "").strip()
        pin = (pin or "").strip()
        if not username or not pin:
            raise AuthError("Enter username and PIN")

        users = self._load_users()
        user = self._find(users, username)
        if user is None or not self._check_pin(user, pin):
            logger.info("Login refused username=%s", username)
            raise AuthError("Invalid credentials")

        if "pinHash" not in user:
            user.pop("pin", None)
            user.update(self._make_secret(pin))
            self._save_users(users)
            logger.info("Upgraded plaintext PIN to hash username=%s", user["username"])

        self._store.set_json(SESSION_KEY, {"username": user["username"], "isLoggedIn": True})
        logger.info("Login username=%s", user["username"])
        return user["username"]

    def logout(self) -> None:
        self._store.set_json(SESSION_KEY, {"username": None, "isLoggedIn": False})
        logger.info("Logout")

    def current_user(self) -> str | None:
        session = self._store.get_json(SESSION_KEY, default=None)
        if not isinstance(session, dict) or not session.get("isLoggedIn"):
            return None
        name = session.get("username")
        if not isinstance(name, str):
            return None
        user = self._find(self._load_users(), name)
        return None if user is None else user["username"]

    # ---- groups ----

    def groups(self, user_id: str) -> list[str]:
        user = self._find(self._load_users(), user_id)
        if user is None:
            return []
        raw = user.get("groups") or []
        return [g for g in raw if isinstance(g, str)]

    def add_group(self, user_id: str, name: str) -> list[str]:
        name = (name or "").strip()
        if not name:
            raise AuthError("Group name is required")
        users = self._load_users()
        user = self._find(users, user_id)
        if user is None:
            raise AuthError("No user logged in")
        groups = [g for g in (user.get("groups") or []) if isinstance(g, str)]
        if name in groups:
            raise AuthError("Group already exists")
        groups.append(name)
        user["groups"] = groups
        self._save_users(users)
        return list(groups)

    def remove_group(self, user_id: str, name: str) -> list[str]:
        """Drop a group name. Tasks that reference it keep their group value."""
        users = self._load_users()
        user = self._find(users, user_id)
        if user is None:
            raise AuthError("No user logged in")
        groups = [g for g in (user.get("groups") or []) if isinstance(g, str)]
        if name not in groups:
            raise AuthError("Group not found")
        groups.remove(name)
        user["groups"] = groups
        self._save_users(users)
        return list(groups)

    # ---- task persistence adapter ----

    def load_tasks_for_user(self, user_id: str) -> list[TaskRecord]:
        data = self._store.get_json(tasks_key(user_id), default=None)
        if data is None:
            # Older layout kept tasks inside the user entry.
            user = self._find(self._load_users(), user_id)
            data = (user or {}).get("tasks") or []
        if not isinstance(data, list):
            raise PersistenceError(f"task list for {user_id!r} is not a list")
        return [r for r in data if isinstance(r, dict)]

    def save_tasks_for_user(self, user_id: str, records: Sequence[TaskRecord]) -> bool:
        try:
            self._store.set_json(tasks_key(user_id), list(records))
        except PersistenceError:
            logger.exception("Failed to save %d tasks user=%s", len(records), user_id)
            return False
        return True
