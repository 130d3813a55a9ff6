"""Key-value settings storage backed by the SQLite settings table.

Known keys (all JSON documents written by core/store.py):
    costing_base       the edited costing state (inputs and derived fields)
    costing_original   the last raw import, for "reset to original"
    costing_outlets    outlets and their price overrides
    costing_day        the current day's sales, surcharge and franchise fee

Environment (loaded from .env by app/main.py):
    DB_PATH, APP_PASSWORD, SECRET_KEY, LOG_LEVEL
"""

import os
from typing import Optional

from menu_costing.db.database import get_connection


def get_setting(key: str, default: str = None) -> Optional[str]:
    """Return the value for a settings key, or default if not found."""
    conn = get_connection()
    try:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else default
    finally:
        conn.close()


def set_setting(key: str, value: str) -> None:
    """Insert or update a settings key-value pair (upsert)."""
    conn = get_connection()
    try:
        conn.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        conn.commit()
    finally:
        conn.close()


def delete_setting(key: str) -> None:
    conn = get_connection()
    try:
        conn.execute("DELETE FROM settings WHERE key = ?", (key,))
        conn.commit()
    finally:
        conn.close()


def log_level() -> str:
    """Read LOG_LEVEL at call time so tests can set it via env."""
    return os.environ.get("LOG_LEVEL", "INFO").upper()
