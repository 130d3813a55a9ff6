"""SQLite database connection management and schema initialization.

Provides a single-file database at ~/.menu_costing/menu_costing.db.
The costing state, outlets and day input are stored as JSON documents in
the settings table (see core/store.py). Every public function that needs a
connection should call get_connection(), use it, and close it in a finally
block.
"""

import os
import sqlite3
from pathlib import Path


def get_db_path() -> Path:
    """Return the active DB path.

    Priority order:
    1. DB_PATH environment variable (used by Docker / local dev / tests)
    2. Default ~/.menu_costing/menu_costing.db
    """
    env_url = os.environ.get("DB_PATH")
    if env_url:
        p = Path(env_url)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    db_dir = Path.home() / ".menu_costing"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "menu_costing.db"


def get_connection(db_path: Path = None) -> sqlite3.Connection:
    """Return a new SQLite connection with Row factory enabled.

    Callers are responsible for closing the connection when done.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path = None) -> None:
    """Create the settings table if it doesn't already exist.

    Called once at application startup from main.py.
    """
    conn = get_connection(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS settings (
                key   TEXT PRIMARY KEY,
                value TEXT
            );
        """)
        conn.commit()
    finally:
        conn.close()
