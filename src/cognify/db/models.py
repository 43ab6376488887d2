"""SQLAlchemy ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from cognify.db.base import Base

JSONType = JSON().with_variant(JSONB, "postgresql")

SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRecord(Base):
    """Durable mirror of one conversation's session."""

    __tablename__ = "session_records"

    conversation_key = Column(String, primary_key=True)
    schema_version = Column(Integer, nullable=False, default=SCHEMA_VERSION)
    payload = Column(JSONType, nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_session_records_last_updated", "last_updated"),)
