# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Rendering Surface
Fixed-size square surface. Layout is expressed in logical units; only
the backing buffer grows with the device pixel ratio (clamped to 1–2×).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from app.config import Settings
from app.utils.geometry_utils import Rect, clamp_pixel_ratio, inset_rect


@dataclass(frozen=True)
class SurfaceGeometry:
    """Logical layout of the lid editor surface."""
    size: int = 640
    safe_inset: float = 28.0
    safe_radius: float = 34.0
    bleed_inset: float = 16.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SurfaceGeometry":
        return cls(
            size=settings.surface_size,
            safe_inset=settings.safe_area_inset,
            safe_radius=settings.safe_area_radius,
            bleed_inset=settings.bleed_inset,
        )

    @property
    def bounds(self) -> Rect:
        return 0.0, 0.0, float(self.size), float(self.size)

    @property
    def safe_area(self) -> Rect:
        return inset_rect(self.bounds, self.safe_inset)

    @property
    def bleed_rect(self) -> Rect:
        return inset_rect(self.safe_area, self.bleed_inset)

    def contains(self, x: float, y: float) -> bool:
        return 0.0 <= x <= self.size and 0.0 <= y <= self.size


class RenderSurface:
    """
    Holds the most recent frame. The compositor writes it; the
    exporter and the preview endpoint read it.
    """

    def __init__(self, geometry: SurfaceGeometry, pixel_ratio: Optional[float] = None) -> None:
        self.geometry = geometry
        self.pixel_ratio = clamp_pixel_ratio(pixel_ratio)
        self._frame: Optional[np.ndarray] = None
        self.render_count = 0

    @property
    def backing_size(self) -> tuple[int, int]:
        """(width, height) of the backing buffer in device pixels."""
        side = int(round(self.geometry.size * self.pixel_ratio))
        return side, side

    @property
    def frame(self) -> Optional[np.ndarray]:
        """Last rendered BGRA uint8 frame, or None before the first render."""
        return self._frame

    @property
    def has_frame(self) -> bool:
        return self._frame is not None

    def present(self, frame: np.ndarray) -> None:
        w, h = self.backing_size
        if frame.shape != (h, w, 4):
            raise ValueError(f"Frame shape {frame.shape} does not match backing buffer {(h, w, 4)}")
        self._frame = frame
        self.render_count += 1

    def clear(self) -> None:
        self._frame = None
