"""Durable key-value access for session records."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import delete, select

from cognify.db.base import Database
from cognify.db.models import SCHEMA_VERSION, SessionRecord


class SessionRecordRepository:
    """Reads and writes `SessionRecord` rows keyed by conversation key."""

    def __init__(self, database: Database):
        self.database = database

    async def get(self, key: str) -> Optional[SessionRecord]:
        async with self.database.session() as db:
            result = await db.execute(
                select(SessionRecord).where(SessionRecord.conversation_key == key)
            )
            return result.scalar_one_or_none()

    async def put(
        self, key: str, payload: Dict[str, Any], last_updated: datetime
    ) -> None:
        async with self.database.session() as db:
            record = await db.get(SessionRecord, key)
            if record is None:
                record = SessionRecord(conversation_key=key)
                db.add(record)
            record.schema_version = SCHEMA_VERSION
            record.payload = payload
            record.last_updated = last_updated
            await db.commit()

    async def delete(self, key: str) -> None:
        async with self.database.session() as db:
            await db.execute(
                delete(SessionRecord).where(SessionRecord.conversation_key == key)
            )
            await db.commit()

    async def delete_older_than(self, cutoff: datetime) -> int:
        async with self.database.session() as db:
            result = await db.execute(
                delete(SessionRecord).where(SessionRecord.last_updated < cutoff)
            )
            await db.commit()
            return result.rowcount or 0
