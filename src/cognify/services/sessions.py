"""Per-conversation session store with a durable mirror."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError

from cognify.db.models import SCHEMA_VERSION
from cognify.db.session_records import SessionRecordRepository
from cognify.errors import PersistenceWarning
from cognify.schemas.common import utcnow
from cognify.schemas.sessions import Session

logger = logging.getLogger(__name__)


class _KeyLock:
    """A per-key mutex and the number of tasks holding or waiting on it."""

    def __init__(self):
        self.mutex = asyncio.Lock()
        self.users = 0


class SessionStore:
    """In-memory sessions keyed by conversation key.

    Memory is authoritative for the life of the process. Every save is
    mirrored to the durable repository; mirror failures are logged and never
    raised. `get` hands out copies, so state only changes through `save`.
    """

    def __init__(
        self,
        repository: Optional[SessionRecordRepository] = None,
        retention: timedelta = timedelta(hours=24),
        sweep_interval: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.retention = retention
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, _KeyLock] = {}
        self._touched: Dict[str, datetime] = {}
        self._last_sweep: Optional[datetime] = None

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """Serialize read-modify-write for one conversation key.

        The registry entry lives only while some task holds or awaits it.
        """
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyLock()
        entry.users += 1
        try:
            async with entry.mutex:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    @property
    def locked_keys(self) -> List[str]:
        return list(self._locks)

    def contains(self, key: str) -> bool:
        return key in self._sessions

    def get(self, key: str) -> Session:
        """Return a working copy of the session, creating a fresh one if needed."""
        session = self._sessions.get(key)
        if session is None:
            session = self._sessions[key] = Session()
            self._touched[key] = self._clock()
            logger.info("Created session %s for %s", session.id, key)
        return session.model_copy(deep=True)

    async def save(self, key: str, session: Session) -> None:
        self._sessions[key] = session.model_copy(deep=True)
        self._touched[key] = self._clock()
        await self._mirror(key, session)
        await self.maybe_sweep()

    async def remove(self, key: str) -> None:
        """Drop a session. Callers must hold `lock(key)`; see `discard`."""
        self._sessions.pop(key, None)
        self._touched.pop(key, None)

        if self.repository is None:
            return
        try:
            await self.repository.delete(key)
        except SQLAlchemyError as exc:
            self._warn("delete", key, exc)

    async def discard(self, key: str) -> None:
        """Tab-close: wait for in-flight requests on the key, then remove it."""
        async with self.lock(key):
            await self.remove(key)

    async def recover(self, key: str) -> Optional[Session]:
        """Rehydrate a session from the durable mirror.

        An in-memory session always wins over the stored copy.
        """
        if key in self._sessions:
            return self._sessions[key].model_copy(deep=True)
        if self.repository is None:
            return None

        try:
            record = await self.repository.get(key)
        except SQLAlchemyError as exc:
            self._warn("read", key, exc)
            return None
        if record is None:
            return None

        if record.schema_version > SCHEMA_VERSION:
            logger.warning(
                "Skipping session record for %s with unknown schema version %s",
                key,
                record.schema_version,
            )
            return None

        try:
            session = Session.model_validate(record.payload)
        except SchemaError as exc:
            logger.warning("Discarding unreadable session record for %s: %s", key, exc)
            return None

        # A concurrent request may have created the session while we awaited.
        if key in self._sessions:
            return self._sessions[key].model_copy(deep=True)
        self._sessions[key] = session
        self._touched[key] = self._clock()
        logger.info("Recovered session %s for %s", session.id, key)
        return session.model_copy(deep=True)

    async def sweep_expired(self, max_age: timedelta) -> None:
        """Evict sessions and delete durable records not updated within `max_age`.

        Keys with a request in flight are left alone.
        """
        now = self._clock()
        self._last_sweep = now
        cutoff = now - max_age
        stale = [
            key
            for key, touched in self._touched.items()
            if touched < cutoff and key not in self._locks
        ]
        for key in stale:
            self._sessions.pop(key, None)
            del self._touched[key]
        if stale:
            logger.info("Evicted %d idle sessions from memory", len(stale))

        if self.repository is None:
            return
        try:
            removed = await self.repository.delete_older_than(cutoff)
        except SQLAlchemyError as exc:
            self._warn("sweep", "*", exc)
            return
        if removed:
            logger.info("Swept %d expired session records", removed)

    async def maybe_sweep(self) -> None:
        now = self._clock()
        if self._last_sweep is None or now - self._last_sweep >= self.sweep_interval:
            await self.sweep_expired(self.retention)

    async def _mirror(self, key: str, session: Session) -> None:
        if self.repository is None:
            return
        try:
            await self.repository.put(
                key, session.model_dump(mode="json", by_alias=True), self._clock()
            )
        except SQLAlchemyError as exc:
            self._warn("write", key, exc)

    @staticmethod
    def _warn(operation: str, key: str, exc: Exception) -> None:
        logger.warning(
            "%s: durable session %s failed for %s: %s",
            PersistenceWarning.__name__,
            operation,
            key,
            exc,
        )
