# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Snapshot Exporter
Encodes what the surface currently shows, guides included, as a
lossless PNG at the full backing-buffer resolution.

The exporter reads the last presented frame and never renders itself,
so a snapshot is exactly the preview the buyer saw. Before the first
render there is nothing to export and export() returns None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.modules.compositor.surface import RenderSurface
from app.utils.image_utils import bgra_to_png_bytes, png_data_url
from app.utils.logger import get_logger
from app.utils.storage import get_snapshot_url, init_session_dirs, next_snapshot_seq, snapshot_path

log = get_logger(__name__)


@dataclass(frozen=True)
class Snapshot:
    png_bytes: bytes
    width: int
    height: int

    @property
    def data_url(self) -> str:
        """data:image/png;base64,… form, used as the cart preview."""
        return png_data_url(self.png_bytes)


def _encode(surface: RenderSurface) -> Optional[Snapshot]:
    frame = surface.frame
    if frame is None:
        return None

    # Exported artwork is always fully opaque
    opaque = frame.copy()
    opaque[..., 3] = 255

    h, w = opaque.shape[:2]
    return Snapshot(png_bytes=bgra_to_png_bytes(opaque), width=w, height=h)


class SnapshotExporter:

    def export(self, surface: RenderSurface) -> Optional[Snapshot]:
        """Encode the current frame, or None if nothing has been rendered."""
        snapshot = _encode(surface)
        if snapshot is None:
            log.info("snapshot_unavailable", reason="no render yet")
            return None
        log.info("snapshot_exported", width=snapshot.width, height=snapshot.height,
                 bytes=len(snapshot.png_bytes))
        return snapshot

    def preview(self, surface: RenderSurface) -> Optional[Snapshot]:
        """Same encoding for the live preview; not recorded as an export."""
        snapshot = _encode(surface)
        if snapshot is not None:
            log.debug("preview_encoded", width=snapshot.width, height=snapshot.height)
        return snapshot

    def save(self, snapshot: Snapshot, session_id: str) -> str:
        """
        Write the snapshot under the session's storage directory.

        Returns:
            Public asset URL of the written file.
        """
        init_session_dirs(session_id)
        seq = next_snapshot_seq(session_id)
        path = snapshot_path(session_id, seq)
        path.write_bytes(snapshot.png_bytes)

        url = get_snapshot_url(session_id, seq)
        log.info("snapshot_saved", path=str(path), url=url)
        return url
