# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Interaction Controller
Owns the DesignState cell for one session and turns editor events into
state changes:

  pointer down / move / up / leave   drag the artwork
  set_scale / set_rotation           slider input, clamped
  open_file / drop_files             artwork import
  change_texture                     texture selection
  reset                              default transform

Every mutation swaps the state and redraws in the same call. Loads run
as asyncio tasks; their completions redraw once, unless the loader
marked them stale.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from app.models.design import DEFAULT_TRANSFORM, DesignState, Texture
from app.modules.assets.loader import AssetLoader, LoadResult
from app.modules.assets.validator import is_image_content_type
from app.modules.compositor.compositor import LayerCompositor, ResolvedAssets
from app.modules.geometry.transform import clamped_transform
from app.utils.logger import get_logger

log = get_logger(__name__)

# Most recent load warnings kept for the session summary
_MAX_WARNINGS = 20


@dataclass(frozen=True)
class UploadedFile:
    """A file handed over by the picker or a drop, already read into memory."""
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


class InteractionController:
    """
    Single writer of the session's DesignState. The compositor, the
    exporter and the HTTP layer only read it.
    """

    def __init__(
        self,
        loader: AssetLoader,
        compositor: LayerCompositor,
        initial_texture: Texture,
    ) -> None:
        self._loader = loader
        self._compositor = compositor
        self._state = DesignState(chosen_texture=initial_texture)

        # Pointer position minus translation, captured on pointer down
        self._drag_anchor: Optional[tuple[float, float]] = None

        self._pending: set[asyncio.Task] = set()
        self.warnings: list[str] = []
        self.last_error: Optional[Exception] = None

    # ─── State ───────────────────────────────────────────────────────────────

    @property
    def state(self) -> DesignState:
        return self._state

    @property
    def dragging(self) -> bool:
        return self._drag_anchor is not None

    @property
    def pending_loads(self) -> int:
        return len(self._pending)

    def render(self) -> np.ndarray:
        """Redraw the surface from the current state and loaded assets."""
        assets = ResolvedAssets(
            template=self._loader.template,
            texture=self._loader.texture_bitmap(self._state.chosen_texture),
        )
        return self._compositor.render(self._state, assets)

    def _commit(self, **changes) -> None:
        self._state = self._state.replace(**changes)
        self.render()

    def _set_transform(
        self,
        translate_x: Optional[float] = None,
        translate_y: Optional[float] = None,
        scale: Optional[float] = None,
        rotation_degrees: Optional[float] = None,
    ) -> None:
        t = self._state.transform
        self._commit(transform=clamped_transform(
            t.translate_x if translate_x is None else translate_x,
            t.translate_y if translate_y is None else translate_y,
            t.scale if scale is None else scale,
            t.rotation_degrees if rotation_degrees is None else rotation_degrees,
        ))

    # ─── Pointer ─────────────────────────────────────────────────────────────

    def pointer_down(self, x: float, y: float) -> bool:
        """Start a drag. Returns False for points off the surface."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        if not self._compositor.surface.geometry.contains(x, y):
            return False
        t = self._state.transform
        self._drag_anchor = (x - t.translate_x, y - t.translate_y)
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Move the artwork while a drag is captured. No bounds on translation."""
        if self._drag_anchor is None:
            return False
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        ax, ay = self._drag_anchor
        self._set_transform(translate_x=x - ax, translate_y=y - ay)
        return True

    def pointer_up(self) -> None:
        self._drag_anchor = None

    def pointer_leave(self) -> None:
        self._drag_anchor = None

    # ─── Sliders ─────────────────────────────────────────────────────────────

    def set_scale(self, value: float) -> bool:
        if not math.isfinite(value):
            return False
        self._set_transform(scale=value)
        return True

    def set_rotation(self, degrees: float) -> bool:
        if not math.isfinite(degrees):
            return False
        self._set_transform(rotation_degrees=degrees)
        return True

    def reset(self) -> None:
        """Default transform. Artwork and texture are left alone."""
        self._drag_anchor = None
        self._commit(transform=DEFAULT_TRANSFORM)

    # ─── Texture ─────────────────────────────────────────────────────────────

    def change_texture(self, texture: Texture) -> Optional[asyncio.Task]:
        """
        Select a texture and redraw at once, with its fallback colour if the
        bitmap is not decoded yet. Returns the load task when one was started.
        """
        self._commit(chosen_texture=texture)
        log.info("texture_changed", texture_id=texture.id)

        if texture.image_ref is None or self._loader.has_texture(texture.id):
            return None
        return self._spawn(self._load_texture(texture))

    async def _load_texture(self, texture: Texture) -> LoadResult:
        result = await self._loader.load_texture(texture)
        if result.stale:
            return result
        if result.ok:
            self.render()
        else:
            self._record_failure(result)
        return result

    # ─── Artwork Import ──────────────────────────────────────────────────────

    def open_file(self, file: UploadedFile) -> asyncio.Task:
        """Import the file picked by the buyer. The loader validates the bytes."""
        log.info("artwork_import", source="picker", filename=file.filename)
        return self._spawn(self._import(file))

    def drop_files(self, files: Iterable[UploadedFile]) -> Optional[asyncio.Task]:
        """Import the first dropped file with an image/* type; ignore the rest."""
        for f in files:
            if is_image_content_type(f.content_type):
                log.info("artwork_import", source="drop", filename=f.filename)
                return self._spawn(self._import(f))
        log.info("drop_ignored", reason="no image file")
        return None

    async def _import(self, file: UploadedFile) -> LoadResult:
        result = await self._loader.load_upload(file.data)
        if result.stale:
            return result
        if result.ok:
            self._commit(artwork=result.to_artwork())
        else:
            self._record_failure(result)
        return result

    # ─── Tasks ───────────────────────────────────────────────────────────────

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def settle(self) -> None:
        """Wait until every load started so far has completed."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()

    def _record_failure(self, result: LoadResult) -> None:
        self.last_error = result.error
        self.warnings.append(str(result.error))
        del self.warnings[:-_MAX_WARNINGS]
