"""Local key-value storage (SQLite)."""
