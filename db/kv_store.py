from __future__ import annotations

import json
import sqlite3
from typing import Any


class SqliteKeyValueStore:
    """JSON values under string keys, one row per key."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_json(self, key: str, default: Any = None) -> Any:
        cur = self.conn.cursor()
        cur.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
        row = cur.fetchone()
        if not row:
            return default
        return json.loads(row[0])

    def set_json(self, key: str, value: Any) -> None:
        sql = (
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, datetime('now')) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at;"
        )
        self.conn.execute(sql, (key, json.dumps(value, ensure_ascii=False)))
        self.conn.commit()
