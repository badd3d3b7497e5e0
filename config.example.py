# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use .env (local, gitignored) for machine-specific values.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory (default: .local/taskdeck).",
    "TASKDECK_STORAGE_PATH": "Key-value storage SQLite path (default: <data_dir>/storage.sqlite3).",
    "TASKDECK_EXPORT_DIR": "Where /export writes files (default: <data_dir>/exports).",
    # Behaviour
    "TASKDECK_DEFAULT_SORT": (
        "Sort of a fresh session: created-desc | due-date-asc | due-date-desc | "
        "priority-desc | title-asc | manual (default: created-desc)."
    ),
    "TASKDECK_PIN_HASH_ITERATIONS": "PBKDF2 iterations for new PIN hashes (default: 120000, min 10000).",
    "TASKDECK_CONSOLE_COLOR": "Dim completed / highlight overdue rows on a TTY (true/false).",
}
