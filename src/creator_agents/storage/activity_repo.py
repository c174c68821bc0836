"""Activity log: a best-effort record of what users did."""

from __future__ import annotations

import asyncio
from datetime import datetime

from creator_agents.log import get_logger
from creator_agents.storage.database import Database
from creator_agents.storage.models import ActivityEntry

logger = get_logger(__name__)


class ActivityLog:
    """Append-only activity log backed by the activity_log table."""

    def __init__(self, db: Database):
        self._db = db
        self._pending: set[asyncio.Task] = set()

    async def add(self, entry: ActivityEntry) -> int:
        cursor = await self._db.conn.execute(
            "INSERT INTO activity_log (user_id, summary, icon) VALUES (?, ?, ?)",
            (entry.user_id, entry.summary, entry.icon),
        )
        await self._db.conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def record(self, user_id: str, summary: str, icon: str = "") -> None:
        """Fire-and-forget insert. Failures are logged, never raised."""
        task = asyncio.create_task(self._record(ActivityEntry(user_id=user_id, summary=summary, icon=icon)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, entry: ActivityEntry) -> None:
        try:
            await self.add(entry)
        except Exception as e:
            logger.warning("activity_record_failed", user_id=entry.user_id, error=str(e))

    async def flush(self) -> None:
        """Wait for all scheduled records to land."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def recent(self, limit: int = 20, user_id: str | None = None) -> list[ActivityEntry]:
        """Most recent entries first."""
        if user_id:
            cursor = await self._db.conn.execute(
                """SELECT * FROM activity_log WHERE user_id = ?
                   ORDER BY id DESC LIMIT ?""",
                (user_id, limit),
            )
        else:
            cursor = await self._db.conn.execute(
                "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?",
                (limit,),
            )
        rows = await cursor.fetchall()
        return [
            ActivityEntry(
                id=row["id"],
                user_id=row["user_id"],
                summary=row["summary"],
                icon=row["icon"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
