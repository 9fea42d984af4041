# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Abstract SessionStore
Clean interface over live design sessions.

Sessions hold decoded numpy bitmaps and a rendered frame, so they live
in process memory. InMemorySessionStore is the only backend.
"""

from __future__ import annotations

import threading
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from app.api.middleware.error_handler import SessionNotFoundError
from app.config import Settings
from app.core.design_session import DesignSession
from app.modules.assets.catalog import TextureCatalog
from app.utils.logger import get_logger
from app.utils.storage import cleanup_session

log = get_logger(__name__)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class SessionStore(ABC):
    """
    Abstract base class for session backends.
    All methods are synchronous; the session's own start() is awaited
    by the route that created it.
    """

    @abstractmethod
    def create_session(
        self,
        pixel_ratio: Optional[float] = None,
        texture_id: Optional[str] = None,
    ) -> DesignSession:
        """Create and register a new, not yet started, session."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[DesignSession]:
        """Return the session by ID, or None if not found."""

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if it did not exist."""

    @abstractmethod
    def count(self) -> int:
        """Number of live sessions."""

    def require_session(self, session_id: str) -> DesignSession:
        """Like get_session, but raises SessionNotFoundError when missing."""
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemorySessionStore(SessionStore):
    """
    Thread-safe in-memory session store using a dict + RLock.
    Sessions idle for longer than ttl_seconds are purged (bitmaps
    released, stored snapshots deleted) on the next create.
    """

    def __init__(
        self,
        settings: Settings,
        catalog: TextureCatalog,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._ttl = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._store: dict[str, DesignSession] = {}
        self._lock = threading.RLock()

    def create_session(
        self,
        pixel_ratio: Optional[float] = None,
        texture_id: Optional[str] = None,
    ) -> DesignSession:
        self.purge_expired()
        session = DesignSession(
            session_id=str(uuid.uuid4()),
            settings=self._settings,
            catalog=self._catalog,
            pixel_ratio=pixel_ratio,
            texture_id=texture_id,
        )
        with self._lock:
            self._store[session.session_id] = session
        log.info("session_created", session_id=session.session_id, backend="memory")
        return session

    def get_session(self, session_id: str) -> Optional[DesignSession]:
        with self._lock:
            session = self._store.get(session_id)
        if session is not None:
            session.touch()
        return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._store.pop(session_id, None)
        if session is None:
            log.warning("delete_session_not_found", session_id=session_id)
            return False
        session.close()
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def purge_expired(self, now: Optional[float] = None) -> list[str]:
        """Drop sessions idle past the TTL. Returns the purged IDs."""
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [
                sid for sid, s in self._store.items()
                if now - s.last_active > self._ttl
            ]
            sessions = [self._store.pop(sid) for sid in expired]

        for session in sessions:
            session.close()
            cleanup_session(session.session_id)
        if expired:
            log.info("sessions_purged", count=len(expired))
        return expired

    def close_all(self) -> None:
        """Close every session. Called on application shutdown."""
        with self._lock:
            sessions = list(self._store.values())
            self._store.clear()
        for session in sessions:
            session.close()
