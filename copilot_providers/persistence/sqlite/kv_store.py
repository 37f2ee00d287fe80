"""SQLite-backed implementation of ``KeyedStore``.

Stores JSON-serialized values per ``(scope, key)``. Every write commits
immediately: the store backs best-effort workspace state, so there is no
unit of work spanning several keys.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, List, Optional

from .engine import create_connection, init_schema

DEFAULT_SCOPE = "default"


class SqliteKeyedStore:
    """Workspace-scoped key/value store.

    Parameters
    ----------
    conn:
        Active SQLite connection with the schema initialized.
    scope:
        Workspace identifier; keys from other scopes are invisible.
    """

    def __init__(self, conn: sqlite3.Connection, scope: str = DEFAULT_SCOPE) -> None:
        self.conn = conn
        self.scope = scope

    @classmethod
    def open(cls, db_path: Optional[str] = None, scope: str = DEFAULT_SCOPE) -> "SqliteKeyedStore":
        """Open (and initialize) the database at ``db_path``."""
        conn = create_connection(db_path)
        init_schema(conn)
        return cls(conn, scope)

    def get(self, key: str) -> Any:
        row = self.conn.execute(
            "SELECT value_json FROM workspace_state WHERE scope = ? AND key = ?",
            (self.scope, key),
        ).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        self.conn.execute(
            """
            INSERT INTO workspace_state (scope, key, value_json, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(scope, key) DO UPDATE SET
                value_json = excluded.value_json,
                updated_at = CURRENT_TIMESTAMP
            """,
            (self.scope, key, payload),
        )
        self.conn.commit()

    def delete(self, key: str) -> None:
        self.conn.execute(
            "DELETE FROM workspace_state WHERE scope = ? AND key = ?",
            (self.scope, key),
        )
        self.conn.commit()

    def list_keys(self) -> List[str]:
        cur = self.conn.execute(
            "SELECT key FROM workspace_state WHERE scope = ? ORDER BY key",
            (self.scope,),
        )
        return [row[0] for row in cur.fetchall()]

    def close(self) -> None:
        self.conn.close()


__all__ = ["SqliteKeyedStore", "DEFAULT_SCOPE"]
