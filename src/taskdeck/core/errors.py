# src/taskdeck/core/errors.py

from __future__ import annotations


class PersistenceError(RuntimeError):
    """Storage read/write failed. Callers keep working from memory."""


class AuthError(ValueError):
    """Sign-up, login or group operation refused; the message is user-facing."""
