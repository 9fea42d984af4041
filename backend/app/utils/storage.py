# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Per-Session Namespaced Storage
Exported snapshots are written under storage/{session_id}/ so that
concurrent sessions never share a file.

Layout per session:
    storage/{session_id}/
        snapshots/
            snapshot_0001.png
            snapshot_0002.png ...
"""

import shutil
from pathlib import Path

from app.config import get_settings


def _root() -> Path:
    return get_settings().storage_root


# ─── Session Directory Builders ──────────────────────────────────────────────

def session_dir(session_id: str) -> Path:
    return _root() / session_id


def snapshots_dir(session_id: str) -> Path:
    return session_dir(session_id) / "snapshots"


def snapshot_path(session_id: str, seq: int) -> Path:
    return snapshots_dir(session_id) / f"snapshot_{seq:04d}.png"


# ─── Lifecycle Helpers ───────────────────────────────────────────────────────

def init_session_dirs(session_id: str) -> None:
    """Create the session's directories. Safe to call repeatedly."""
    snapshots_dir(session_id).mkdir(parents=True, exist_ok=True)


def cleanup_session(session_id: str) -> None:
    """Remove everything stored for a session. No-op when nothing exists."""
    d = session_dir(session_id)
    if d.exists():
        shutil.rmtree(d)


def session_exists(session_id: str) -> bool:
    return session_dir(session_id).exists()


def next_snapshot_seq(session_id: str) -> int:
    """1 + the highest snapshot number already on disk for the session."""
    d = snapshots_dir(session_id)
    if not d.exists():
        return 1
    seqs = [
        int(p.stem.rsplit("_", 1)[-1])
        for p in d.glob("snapshot_*.png")
        if p.stem.rsplit("_", 1)[-1].isdigit()
    ]
    return max(seqs, default=0) + 1


def get_asset_url(session_id: str, relative_path: str) -> str:
    """Service-relative URL for a stored session asset."""
    return f"/assets/{session_id}/{relative_path}"


def get_snapshot_url(session_id: str, seq: int) -> str:
    return get_asset_url(session_id, f"snapshots/snapshot_{seq:04d}.png")


def get_public_url(url: str) -> str:
    """
    Prefix a relative asset URL with PUBLIC_BASE_URL when one is set,
    so it stays reachable from outside this service.
    """
    base = get_settings().public_base_url
    if not base or url.startswith(("http://", "https://")):
        return url
    return base.rstrip("/") + "/" + url.lstrip("/")
