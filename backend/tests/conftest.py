# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

import pytest


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Tests override settings via env vars; drop the cached copies around each test."""
    from app.config import get_settings
    from app.modules.assets.catalog import get_catalog

    get_settings.cache_clear()
    get_catalog.cache_clear()
    yield
    get_settings.cache_clear()
    get_catalog.cache_clear()


@pytest.fixture
def tmp_storage(monkeypatch, tmp_path):
    """Point STORAGE_ROOT and STATIC_ROOT at a temp dir. Returns (storage, static)."""
    storage = tmp_path / "storage"
    static = tmp_path / "static"
    static.mkdir()
    monkeypatch.setenv("STORAGE_ROOT", str(storage))
    monkeypatch.setenv("STATIC_ROOT", str(static))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    from app.config import get_settings
    get_settings.cache_clear()
    return storage, static
