# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Design Session
Everything one buyer's editor needs, wired together:

  AssetLoader  →  InteractionController  →  LayerCompositor  →  RenderSurface
                                                                     ↓
                                                             SnapshotExporter

A session is created with the catalog default texture and no artwork,
renders once on start(), and from then on redraws after every change.
"""

from __future__ import annotations

import time
from typing import Optional

from app.config import Settings
from app.models.cart import CartItem, build_cart_item
from app.models.design import unit_price
from app.models.session import SessionSummary
from app.modules.assets.catalog import TextureCatalog
from app.modules.assets.loader import AssetLoader
from app.modules.compositor.compositor import LayerCompositor
from app.modules.compositor.surface import RenderSurface, SurfaceGeometry
from app.modules.export.snapshot import Snapshot, SnapshotExporter
from app.modules.interaction.controller import InteractionController
from app.utils.logger import get_logger
from app.utils.storage import get_public_url

log = get_logger(__name__)


class DesignSession:

    def __init__(
        self,
        session_id: str,
        settings: Settings,
        catalog: TextureCatalog,
        pixel_ratio: Optional[float] = None,
        texture_id: Optional[str] = None,
        loader: Optional[AssetLoader] = None,
    ) -> None:
        self.session_id = session_id
        self.settings = settings
        self.catalog = catalog

        ratio = settings.default_pixel_ratio if pixel_ratio is None else pixel_ratio
        self.surface = RenderSurface(SurfaceGeometry.from_settings(settings), ratio)
        self.loader = loader or AssetLoader.from_settings(settings)
        self.compositor = LayerCompositor(self.surface)
        self.controller = InteractionController(
            self.loader,
            self.compositor,
            catalog.get(texture_id) if texture_id else catalog.default,
        )
        self.exporter = SnapshotExporter()

        self.last_snapshot: Optional[Snapshot] = None
        self.last_snapshot_url: Optional[str] = None
        self.created_at = time.monotonic()
        self.last_active = self.created_at

    def touch(self) -> None:
        self.last_active = time.monotonic()

    async def start(self) -> None:
        """
        First render. The template is fetched first so the opening frame
        has its background; a failed fetch falls back to the board colour.
        A non-default initial texture is loaded the same way.
        """
        await self.loader.load_template()
        self.controller.render()

        chosen = self.controller.state.chosen_texture
        if chosen.image_ref is not None:
            self.controller.change_texture(chosen)
            await self.controller.settle()

        log.info(
            "session_started",
            session_id=self.session_id,
            pixel_ratio=self.surface.pixel_ratio,
            texture_id=self.controller.state.chosen_texture.id,
            template=self.loader.template is not None,
        )

    # ─── Export ──────────────────────────────────────────────────────────────

    def snapshot(self, persist: bool = True) -> Optional[Snapshot]:
        """Export the current surface; persist it to storage when asked."""
        snapshot = self.exporter.export(self.surface)
        if snapshot is None:
            return None
        self.last_snapshot = snapshot
        self.last_snapshot_url = (
            self.exporter.save(snapshot, self.session_id) if persist else None
        )
        return snapshot

    def cart_item(self) -> CartItem:
        """
        Cart record for the current design. The preview is the last
        snapshot the buyer took; without one the item carries no preview
        and the cart shows its placeholder. No snapshot is taken here.
        """
        preview = preview_url = None
        if self.last_snapshot is not None:
            preview = self.last_snapshot.data_url
            if self.last_snapshot_url is not None:
                preview_url = get_public_url(self.last_snapshot_url)
        return build_cart_item(
            self.controller.state,
            self.settings.base_price,
            preview=preview,
            preview_url=preview_url,
        )

    # ─── Summary / Lifecycle ─────────────────────────────────────────────────

    def summary(self) -> SessionSummary:
        state = self.controller.state
        artwork = state.artwork
        return SessionSummary(
            session_id=self.session_id,
            texture_id=state.chosen_texture.id,
            texture_name=state.chosen_texture.display_name,
            unit_price=unit_price(state, self.settings.base_price),
            currency=self.settings.currency,
            transform=state.transform,
            has_artwork=artwork is not None,
            artwork_size=artwork.natural_size if artwork is not None else None,
            pixel_ratio=self.surface.pixel_ratio,
            surface_size=self.surface.geometry.size,
            backing_size=self.surface.backing_size,
            render_count=self.surface.render_count,
            dragging=self.controller.dragging,
            snapshot_available=self.surface.has_frame,
            warnings=list(self.controller.warnings),
        )

    def close(self) -> None:
        """Release bitmaps and stop in-flight loads. Stored snapshots are kept."""
        self.controller.cancel_pending()
        self.loader.release()
        self.surface.clear()
        log.info("session_closed", session_id=self.session_id)
