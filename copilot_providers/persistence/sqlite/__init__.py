from __future__ import annotations

from .engine import create_connection, db_session, init_schema
from .kv_store import DEFAULT_SCOPE, SqliteKeyedStore

__all__ = [
    "create_connection",
    "db_session",
    "init_schema",
    "SqliteKeyedStore",
    "DEFAULT_SCOPE",
]
