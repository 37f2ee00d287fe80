"""SQLite engine helpers for the persistence layer.

Purpose
-------
Provide safe, centralized helpers for opening SQLite connections and ensuring
schema availability for the workspace-state store backing the TTL cache.

External dependencies
---------------------
- Standard library only (``sqlite3``). No side effects at import time.

Timeout and reliability strategy
--------------------------------
- Applies a standard ``busy_timeout`` (milliseconds) from
  ``copilot_providers.config.defaults`` to mitigate lock contention.
- Enables WAL journaling and NORMAL synchronous mode for durability with good
  interactive performance.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ...config.defaults import (
    SQLITE_BUSY_TIMEOUT_MS,
    SQLITE_DEFAULT_DB_FILENAME,
    SQLITE_JOURNAL_MODE,
    SQLITE_SYNCHRONOUS,
)

DEFAULT_DB_DIR = Path.home() / ".copilot_providers"
DEFAULT_DB_PATH = DEFAULT_DB_DIR / SQLITE_DEFAULT_DB_FILENAME


def get_db_path(db_path: Optional[str] = None) -> Path:
    """Return a concrete database file path (``~`` expanded; default when ``None``)."""
    return Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a SQLite connection with sane defaults and apply PRAGMA settings.

    Behavior
    --------
    - Ensures the parent directory exists prior to opening the database file
      (``":memory:"`` is passed through untouched).
    - Applies journal mode, synchronous mode, and busy timeout from centralized
      defaults.

    Returns
    -------
    sqlite3.Connection
        An open connection with ``row_factory`` set to ``sqlite3.Row``.
    """
    if db_path == ":memory:":
        conn = sqlite3.connect(db_path)
    else:
        path = get_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path))
        conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
    conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")  # ms
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create required tables if they do not exist, then commit.

    Schema overview
    ---------------
    - ``workspace_state``: (scope, key) -> JSON value, one scope per
      workspace session.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS workspace_state (
            scope TEXT NOT NULL,
            key TEXT NOT NULL,
            value_json TEXT NOT NULL,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (scope, key)
        );
        """
    )
    conn.commit()


@contextmanager
def db_session(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Context manager yielding a connection with schema initialized.

    Commits on normal exit, rolls back on exception, always closes.
    """
    conn = create_connection(db_path)
    try:
        init_schema(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
