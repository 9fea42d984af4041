# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Layer Compositor
Renders a DesignState onto the surface in a fixed order, back to front:

  1. Background   template cover-scaled over the full surface, or a dark fill
  2. Safe area    rounded-rect clip, inset from the surface edge
  3. Texture      chosen texture cover-scaled (or its fallback colour), clipped
  4. Gloss        translucent white gradient over the safe area, clipped
  5. Artwork      user upload at its computed placement, clipped
  6. Guides       dashed bleed outline, drawn after the clip is released

render_frame() is a pure function of its arguments: the same state and
assets always give the same pixels. LayerCompositor adds the surface
and logging around it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from app.models.design import DesignState
from app.modules.compositor.layers import (
    blank_buffer,
    draw_artwork,
    draw_background,
    draw_gloss,
    draw_guides,
    draw_texture,
    rounded_rect_mask,
)
from app.modules.compositor.surface import RenderSurface, SurfaceGeometry
from app.utils.geometry_utils import scale_rect
from app.utils.image_utils import to_uint8
from app.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedAssets:
    """Bitmaps available at render time. None means 'use the fallback'."""
    template: Optional[np.ndarray] = None
    texture: Optional[np.ndarray] = None


def render_frame(
    state: DesignState,
    assets: ResolvedAssets,
    geometry: SurfaceGeometry,
    pixel_ratio: float,
) -> np.ndarray:
    """
    Composite one frame.

    Args:
        state:       Design to draw
        assets:      Template and texture bitmaps resolved for this state
        geometry:    Logical surface layout
        pixel_ratio: Backing-buffer pixels per logical unit (already clamped)

    Returns:
        BGRA uint8 frame of shape (size·ratio, size·ratio, 4).
    """
    side = int(round(geometry.size * pixel_ratio))
    buf = blank_buffer(side, side)
    safe_px = scale_rect(geometry.safe_area, pixel_ratio)

    buf = draw_background(buf, assets.template)

    clip = rounded_rect_mask(side, side, safe_px, geometry.safe_radius * pixel_ratio)

    buf = draw_texture(buf, assets.texture, state.chosen_texture.fill_color, safe_px, clip)
    buf = draw_gloss(buf, safe_px, clip)

    if state.artwork is not None:
        buf, _ = draw_artwork(
            buf, state.artwork, state.transform,
            geometry.safe_area, pixel_ratio, clip,
        )

    # Clip released: guides may sit on the safe-area edge
    buf = draw_guides(buf, scale_rect(geometry.bleed_rect, pixel_ratio), pixel_ratio)

    return to_uint8(buf)


class LayerCompositor:
    """Renders into a RenderSurface. Holds no design state of its own."""

    def __init__(self, surface: RenderSurface) -> None:
        self.surface = surface

    def render(self, state: DesignState, assets: ResolvedAssets) -> np.ndarray:
        t0 = time.perf_counter()
        frame = render_frame(state, assets, self.surface.geometry, self.surface.pixel_ratio)
        self.surface.present(frame)

        log.debug(
            "render_complete",
            texture_id=state.chosen_texture.id,
            texture_bitmap=assets.texture is not None,
            template=assets.template is not None,
            has_artwork=state.artwork is not None,
            pixel_ratio=self.surface.pixel_ratio,
            render_count=self.surface.render_count,
            elapsed_ms=round((time.perf_counter() - t0) * 1000, 1),
        )
        return frame
