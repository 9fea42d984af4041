# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — GET /assets/{session_id}/{file_path}
Streams stored snapshots from per-session storage, e.g.
/assets/{session_id}/snapshots/snapshot_0001.png. Files outlive the
live session so cart previews keep working after the editor closes.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from app.api.middleware.error_handler import SessionNotFoundError
from app.utils.logger import get_logger
from app.utils.storage import session_dir, session_exists

router = APIRouter(tags=["assets"])
log = get_logger(__name__)

# Only exported images are servable
ALLOWED_EXTENSIONS = {".png"}


def _safe_resolve(session_id: str, file_path: str) -> Path:
    """
    Resolve and validate the requested file path.
    - Ensures the path is inside the session's storage directory
    - Rejects path traversal attempts (../ etc.)
    - Rejects disallowed file extensions
    Raises HTTPException on any violation.
    """
    root = session_dir(session_id).resolve()
    requested = (root / file_path).resolve()

    try:
        requested.relative_to(root)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Path traversal not allowed.",
        )

    if requested.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"File type '{requested.suffix}' not servable.",
        )

    return requested


@router.get(
    "/assets/{session_id}/{file_path:path}",
    summary="Retrieve a stored snapshot",
)
async def get_asset(session_id: str, file_path: str) -> FileResponse:
    if not session_exists(session_id):
        raise SessionNotFoundError(session_id)

    resolved = _safe_resolve(session_id, file_path)

    if not resolved.is_file():
        log.warning("asset_not_found", session_id=session_id, file_path=file_path)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset '{file_path}' not found for session {session_id}.",
        )

    media_type, _ = mimetypes.guess_type(str(resolved))
    media_type = media_type or "application/octet-stream"

    log.debug("asset_served", session_id=session_id, file_path=file_path)
    return FileResponse(path=str(resolved), media_type=media_type)
