# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Geometry Utilities
Rectangle, scaling, and rotation helpers shared by the placement
maths and the layer compositor.

Rectangles are (x, y, w, h) float tuples in logical surface units
unless a function says otherwise.
"""

import math

Rect = tuple[float, float, float, float]
Point = tuple[float, float]

PIXEL_RATIO_MIN = 1.0
PIXEL_RATIO_MAX = 2.0


# ─── Scaling ─────────────────────────────────────────────────────────────────

def fit_scale(src_w: float, src_h: float, dst_w: float, dst_h: float) -> float:
    """Largest uniform scale that keeps the source inside the target."""
    return min(dst_w / src_w, dst_h / src_h)


def cover_scale(src_w: float, src_h: float, dst_w: float, dst_h: float) -> float:
    """Smallest uniform scale that makes the source fill the target."""
    return max(dst_w / src_w, dst_h / src_h)


def cover_rect(src_w: float, src_h: float, dst: Rect) -> Rect:
    """
    Rectangle a source image occupies when cover-scaled into dst.
    Centred on dst; overflow on one axis is cropped by the caller.
    """
    x, y, w, h = dst
    s = cover_scale(src_w, src_h, w, h)
    sw, sh = src_w * s, src_h * s
    return x + (w - sw) / 2.0, y + (h - sh) / 2.0, sw, sh


def clamp_pixel_ratio(value: float | None) -> float:
    """
    Clamp a device pixel ratio into [1, 2].
    Missing, non-finite, or non-positive values fall back to 1.
    """
    if value is None or not math.isfinite(value) or value <= 0:
        return PIXEL_RATIO_MIN
    return max(PIXEL_RATIO_MIN, min(PIXEL_RATIO_MAX, float(value)))


# ─── Rectangles ──────────────────────────────────────────────────────────────

def inset_rect(rect: Rect, margin: float) -> Rect:
    x, y, w, h = rect
    return x + margin, y + margin, w - margin * 2, h - margin * 2


def scale_rect(rect: Rect, factor: float) -> Rect:
    """Scale a rect from logical units into backing-buffer pixels."""
    x, y, w, h = rect
    return x * factor, y * factor, w * factor, h * factor


def bbox_of_points(points: list[Point]) -> Rect:
    """Axis-aligned bounds of a point set as (x, y, w, h)."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)


# ─── Rotation ────────────────────────────────────────────────────────────────

def rotate_point(x: float, y: float, cx: float, cy: float, angle_deg: float) -> Point:
    """
    Rotate (x, y) about (cx, cy). Positive angles turn clockwise on
    screen, where the y axis points down.
    """
    rad = math.radians(angle_deg)
    c, s = math.cos(rad), math.sin(rad)
    dx, dy = x - cx, y - cy
    return cx + dx * c - dy * s, cy + dx * s + dy * c
