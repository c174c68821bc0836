"""JSON key/value repository over the kv_store table."""

from __future__ import annotations

import json
from typing import Any

from creator_agents.storage.database import Database


class KeyValueRepository:
    """Persist JSON-serializable values under string keys."""

    def __init__(self, db: Database):
        self._db = db

    async def get(self, key: str) -> Any | None:
        """Return the decoded value stored at *key*, or None when absent."""
        cursor = await self._db.conn.execute(
            "SELECT value_json FROM kv_store WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row["value_json"])

    async def exists(self, key: str) -> bool:
        cursor = await self._db.conn.execute("SELECT 1 FROM kv_store WHERE key = ?", (key,))
        return await cursor.fetchone() is not None

    async def set(self, key: str, value: Any) -> None:
        """Overwrite the value stored at *key*."""
        await self._db.conn.execute(
            """INSERT INTO kv_store (key, value_json)
               VALUES (?, ?)
               ON CONFLICT(key)
               DO UPDATE SET value_json = excluded.value_json,
                             updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
            (key, json.dumps(value, ensure_ascii=False)),
        )
        await self._db.conn.commit()

    async def delete(self, key: str) -> bool:
        cursor = await self._db.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await self._db.conn.commit()
        return cursor.rowcount > 0

    async def keys(self, prefix: str = "") -> list[str]:
        cursor = await self._db.conn.execute(
            "SELECT key FROM kv_store WHERE key LIKE ? ORDER BY key",
            (f"{prefix}%",),
        )
        rows = await cursor.fetchall()
        return [row["key"] for row in rows]
