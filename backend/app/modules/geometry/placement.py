# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Artwork Placement
Computes where the artwork layer lands inside the safe area.

The artwork is first fit-scaled into the safe area, then multiplied by
the user's scale factor. Composition order, applied to the image's
own centre:

    translate to (area centre + translate_x/y)
      → rotate by rotation_degrees
        → scale
          → draw centred

translate_x/y is therefore an offset in the unrotated frame, which is
what the drag handler computes against.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from app.models.design import Transform
from app.utils.geometry_utils import Point, Rect, bbox_of_points, fit_scale, rotate_point


@dataclass(frozen=True)
class Placement:
    """
    Resolved artwork placement. Coordinates are logical units relative
    to the safe-area origin (top-left).
    """
    center_x: float
    center_y: float
    width: float
    height: float
    rotation_degrees: float
    natural_width: int
    natural_height: int

    @property
    def scale_factor(self) -> float:
        """Natural pixels → logical units."""
        return self.width / self.natural_width

    def corners(self) -> list[Point]:
        """Rotated corners in order top-left, top-right, bottom-right, bottom-left."""
        hw, hh = self.width / 2.0, self.height / 2.0
        cx, cy = self.center_x, self.center_y
        raw = [
            (cx - hw, cy - hh),
            (cx + hw, cy - hh),
            (cx + hw, cy + hh),
            (cx - hw, cy + hh),
        ]
        return [rotate_point(x, y, cx, cy, self.rotation_degrees) for x, y in raw]

    def bounds(self) -> Rect:
        """Axis-aligned bounding box of the rotated artwork."""
        return bbox_of_points(self.corners())

    def affine_matrix(
        self,
        origin: Point = (0.0, 0.0),
        pixel_ratio: float = 1.0,
    ) -> np.ndarray:
        """
        2×3 matrix mapping artwork pixel indices to backing-buffer pixel
        indices, for cv2.warpAffine.

        Args:
            origin:      Safe-area top-left in logical surface units
            pixel_ratio: Backing-buffer pixels per logical unit
        """
        rad = math.radians(self.rotation_degrees)
        c, s = math.cos(rad), math.sin(rad)
        k = pixel_ratio * self.scale_factor
        linear = np.array([[k * c, -k * s], [k * s, k * c]], dtype=np.float64)

        centre = np.array([
            (origin[0] + self.center_x) * pixel_ratio,
            (origin[1] + self.center_y) * pixel_ratio,
        ])
        half = np.array([self.natural_width / 2.0, self.natural_height / 2.0])
        offset = centre - linear @ half

        # Edge coordinates → OpenCV pixel-index coordinates (centres at +0.5)
        offset = offset + linear @ np.array([0.5, 0.5]) - 0.5

        return np.hstack([linear, offset.reshape(2, 1)])


def compute_placement(
    transform: Transform,
    natural_size: tuple[int, int],
    area_size: tuple[float, float],
) -> Placement:
    """
    Place the artwork for the given transform.

    Args:
        transform:    Current artwork transform (scale already clamped)
        natural_size: (width, height) of the decoded artwork in pixels
        area_size:    (width, height) of the safe area in logical units

    Returns:
        Placement relative to the safe-area origin.
    """
    nw, nh = natural_size
    aw, ah = area_size
    if nw <= 0 or nh <= 0:
        raise ValueError(f"Artwork dimensions must be positive, got {natural_size}")

    scale = transform.scale * fit_scale(nw, nh, aw, ah)
    return Placement(
        center_x=aw / 2.0 + transform.translate_x,
        center_y=ah / 2.0 + transform.translate_y,
        width=nw * scale,
        height=nh * scale,
        rotation_degrees=transform.rotation_degrees,
        natural_width=nw,
        natural_height=nh,
    )
