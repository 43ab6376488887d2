"""Database connection and session management."""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from cognify.config import Settings

Base = declarative_base()


class Database:
    """Owns the async engine and session factory for one application."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def init(self) -> None:
        """Initialize database connection."""
        if self.engine is not None:
            return

        engine_args: Dict[str, Any] = {
            "pool_pre_ping": True,
            "echo": self.settings.debug,
        }

        # SQLite (used in tests) doesn't support pool_size/max_overflow
        if not self.settings.db_url.startswith("sqlite"):
            engine_args["pool_size"] = self.settings.db_pool_size
            engine_args["max_overflow"] = self.settings.db_max_overflow
        elif ":memory:" in self.settings.db_url:
            # One shared connection, otherwise every checkout sees an empty database
            engine_args["poolclass"] = StaticPool
            engine_args["connect_args"] = {"check_same_thread": False}

        self.engine = create_async_engine(self.settings.db_url, **engine_args)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        # For SQLite used in tests and local runs, create tables automatically
        if self.settings.db_url.startswith("sqlite"):
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database connection."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.sessionmaker = None

    def session(self) -> AsyncSession:
        if self.sessionmaker is None:
            raise RuntimeError("Database is not initialized")
        return self.sessionmaker()
