# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — FastAPI Dependencies
Singleton providers for the SessionStore and the texture catalog.
The store is created once during the lifespan startup in main.py and
kept here at module level; route handlers receive it via Depends().
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.config import get_settings
from app.core.session_store import InMemorySessionStore, SessionStore
from app.modules.assets.catalog import TextureCatalog, get_catalog
from app.utils.logger import get_logger

log = get_logger(__name__)

# ─── SessionStore Singleton ──────────────────────────────────────────────────

_session_store: SessionStore | None = None


def init_session_store() -> SessionStore:
    """
    Initialise the SessionStore singleton.
    Called once during application lifespan startup.
    """
    global _session_store
    settings = get_settings()
    log.info("init_session_store", backend="memory", ttl_seconds=settings.session_ttl_seconds)
    _session_store = InMemorySessionStore(settings, get_catalog())
    return _session_store


def shutdown_session_store() -> None:
    global _session_store
    if isinstance(_session_store, InMemorySessionStore):
        _session_store.close_all()
    _session_store = None


def get_session_store() -> SessionStore:
    """
    FastAPI dependency: inject the SessionStore singleton into route handlers.

    Usage in a route:
        @router.get("/sessions/{session_id}")
        async def get_session(session_id: str, store: SessionStoreDep):
            session = store.require_session(session_id)
            ...
    """
    if _session_store is None:
        raise RuntimeError(
            "SessionStore has not been initialised. "
            "Ensure init_session_store() is called during app lifespan startup."
        )
    return _session_store


# Annotated type aliases for clean route signatures
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
CatalogDep = Annotated[TextureCatalog, Depends(get_catalog)]
