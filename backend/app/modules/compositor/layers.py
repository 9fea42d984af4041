# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Layer Painters
One function per compositor layer. Each takes the float32 BGRA buffer
(backing-buffer pixels, straight alpha in [0, 1]) and returns a new
buffer; none of them keeps state between calls.

Clipping is a float coverage mask multiplied into the source alpha.
The safe-area mask is anti-aliased analytically from the rounded
rectangle's signed distance, so it is identical on every render.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Optional

import cv2
import numpy as np

from app.models.design import ArtworkAsset, Transform
from app.modules.geometry.placement import Placement, compute_placement
from app.utils.geometry_utils import Point, Rect, cover_rect
from app.utils.image_utils import alpha_composite, parse_hex_color, solid_bgra, to_float

# Visual constants (logical units where applicable)
_BACKGROUND_FILL = "#0b0f1a"
_GLOSS_STOPS   = (0.0, 0.08, 0.4)
_GLOSS_ALPHAS  = (0.25, 0.06, 0.0)
_WHITE         = (255, 255, 255)
_GUIDE_ALPHA   = 0.25
_GUIDE_WIDTH   = 2.0
_GUIDE_DASH    = 6.0
_GUIDE_GAP     = 8.0

# cv2 fixed-point precision for sub-pixel line endpoints
_SHIFT = 4
_SHIFT_SCALE = 1 << _SHIFT


# ─── Helpers ─────────────────────────────────────────────────────────────────

def blank_buffer(w: int, h: int) -> np.ndarray:
    """Fully transparent float32 BGRA buffer."""
    return np.zeros((h, w, 4), dtype=np.float32)


def rounded_rect_mask(h: int, w: int, rect: Rect, radius: float) -> np.ndarray:
    """
    Anti-aliased coverage mask (H×W float32 in [0, 1]) of a rounded
    rectangle given in pixel units.
    """
    x, y, rw, rh = rect
    r = max(0.0, min(radius, rw / 2.0, rh / 2.0))
    cx, cy = x + rw / 2.0, y + rh / 2.0

    xs = np.arange(w, dtype=np.float32) + 0.5
    ys = np.arange(h, dtype=np.float32) + 0.5
    qx = (np.abs(xs - cx) - (rw / 2.0 - r))[np.newaxis, :]
    qy = (np.abs(ys - cy) - (rh / 2.0 - r))[:, np.newaxis]

    outside = np.hypot(np.maximum(qx, 0.0), np.maximum(qy, 0.0))
    inside = np.minimum(np.maximum(qx, qy), 0.0)
    dist = outside + inside - r
    return np.clip(0.5 - dist, 0.0, 1.0).astype(np.float32)


def _resize(bitmap: np.ndarray, tw: int, th: int) -> np.ndarray:
    bh, bw = bitmap.shape[:2]
    if (tw, th) == (bw, bh):
        return bitmap
    interp = cv2.INTER_AREA if tw < bw else cv2.INTER_LINEAR
    return cv2.resize(bitmap, (tw, th), interpolation=interp)


def paste_layer(h: int, w: int, img: np.ndarray, x: float, y: float) -> np.ndarray:
    """
    Place a float BGRA image on a transparent H×W layer with its
    top-left at (x, y), cropping whatever falls outside.
    """
    layer = blank_buffer(w, h)
    x0, y0 = int(math.floor(x + 0.5)), int(math.floor(y + 0.5))
    ih, iw = img.shape[:2]

    dx0, dy0 = max(0, x0), max(0, y0)
    dx1, dy1 = min(w, x0 + iw), min(h, y0 + ih)
    if dx1 <= dx0 or dy1 <= dy0:
        return layer

    sx0, sy0 = dx0 - x0, dy0 - y0
    layer[dy0:dy1, dx0:dx1] = img[sy0:sy0 + (dy1 - dy0), sx0:sx0 + (dx1 - dx0)]
    return layer


def cover_layer(bitmap: np.ndarray, dst: Rect, h: int, w: int) -> np.ndarray:
    """Cover-scale a uint8 BGRA bitmap into dst (pixels) on an H×W layer."""
    bh, bw = bitmap.shape[:2]
    x, y, cw, ch = cover_rect(bw, bh, dst)
    resized = _resize(bitmap, max(1, int(round(cw))), max(1, int(round(ch))))
    return paste_layer(h, w, to_float(resized), x, y)


def dash_segments(rect: Rect, dash: float, gap: float) -> list[tuple[Point, Point]]:
    """
    Split a rectangle outline into dash segments. The path starts at the
    top-left corner and runs clockwise; the dash pattern carries on
    across corners, so a dash may bend around one.
    """
    x, y, w, h = rect
    pts = [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]
    edges = []
    offset = 0.0
    for a, b in zip(pts, pts[1:]):
        length = math.hypot(b[0] - a[0], b[1] - a[1])
        edges.append((a, b, offset, length))
        offset += length
    perimeter = offset

    def at(edge, dist: float) -> Point:
        a, b, start, length = edge
        t = 0.0 if length == 0 else (dist - start) / length
        return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t

    segments: list[tuple[Point, Point]] = []
    pos = 0.0
    while pos < perimeter:
        end = min(pos + dash, perimeter)
        for edge in edges:
            _, _, start, length = edge
            lo, hi = max(pos, start), min(end, start + length)
            if hi > lo:
                segments.append((at(edge, lo), at(edge, hi)))
        pos += dash + gap
    return segments


def _fixed(p: Point) -> tuple[int, int]:
    # Edge coordinates → pixel-index coordinates, in cv2 fixed point
    return (
        int(round((p[0] - 0.5) * _SHIFT_SCALE)),
        int(round((p[1] - 0.5) * _SHIFT_SCALE)),
    )


# ─── Layers ──────────────────────────────────────────────────────────────────

def draw_background(buf: np.ndarray, template: Optional[np.ndarray]) -> np.ndarray:
    """
    Template cover-scaled over the whole surface. The dark board fill goes
    down first so a template with transparency still yields an opaque frame.
    """
    h, w = buf.shape[:2]
    buf = alpha_composite(buf, solid_bgra(h, w, parse_hex_color(_BACKGROUND_FILL)))
    if template is None:
        return buf
    return alpha_composite(buf, cover_layer(template, (0.0, 0.0, float(w), float(h)), h, w))


def draw_texture(
    buf: np.ndarray,
    bitmap: Optional[np.ndarray],
    fill_color: str,
    safe_px: Rect,
    clip: np.ndarray,
) -> np.ndarray:
    """Texture bitmap cover-scaled into the safe area, else a solid fill."""
    h, w = buf.shape[:2]
    if bitmap is not None:
        layer = cover_layer(bitmap, safe_px, h, w)
    else:
        layer = solid_bgra(h, w, parse_hex_color(fill_color))
    return alpha_composite(buf, layer, clip)


def draw_gloss(buf: np.ndarray, safe_px: Rect, clip: np.ndarray) -> np.ndarray:
    """Top-to-bottom white sheen over the safe area."""
    h, w = buf.shape[:2]
    _, y, _, sh = safe_px
    t = (np.arange(h, dtype=np.float32) + 0.5 - y) / sh
    alpha = np.interp(t, _GLOSS_STOPS, _GLOSS_ALPHAS).astype(np.float32)
    alpha[(t < 0.0) | (t > 1.0)] = 0.0

    layer = solid_bgra(h, w, _WHITE)
    layer[..., 3] = alpha[:, np.newaxis]
    return alpha_composite(buf, layer, clip)


def draw_artwork(
    buf: np.ndarray,
    artwork: ArtworkAsset,
    transform: Transform,
    safe_area: Rect,
    pixel_ratio: float,
    clip: np.ndarray,
) -> tuple[np.ndarray, Placement]:
    """
    Warp the artwork into place and composite it inside the clip.

    Args:
        safe_area: Safe area in logical units (placement is computed there)

    Returns:
        (new buffer, placement used)
    """
    h, w = buf.shape[:2]
    sx, sy, sw, sh = safe_area
    placement = compute_placement(transform, artwork.natural_size, (sw, sh))

    bitmap = artwork.bitmap
    k = placement.scale_factor * pixel_ratio
    warp_placement = placement
    if k < 1.0:
        # Area-average down first; warpAffine alone would alias
        rw = max(1, int(round(artwork.natural_width * k)))
        rh = max(1, int(round(artwork.natural_height * k)))
        bitmap = _resize(bitmap, rw, rh)
        warp_placement = dataclasses.replace(placement, natural_width=rw, natural_height=rh)

    src = to_float(bitmap)
    src[..., :3] *= src[..., 3:4]   # premultiply so edges don't pick up black
    matrix = warp_placement.affine_matrix(origin=(sx, sy), pixel_ratio=pixel_ratio)
    warped = cv2.warpAffine(
        src, matrix, (w, h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0.0, 0.0, 0.0, 0.0),
    )

    a = warped[..., 3:4]
    safe_a = np.where(a > 0, a, 1.0)
    warped[..., :3] = np.clip(np.where(a > 0, warped[..., :3] / safe_a, 0.0), 0.0, 1.0)
    warped[..., 3] = np.clip(warped[..., 3], 0.0, 1.0)

    return alpha_composite(buf, warped, clip), placement


def draw_guides(buf: np.ndarray, bleed_px: Rect, pixel_ratio: float) -> np.ndarray:
    """Dashed bleed outline. Drawn without the safe-area clip."""
    h, w = buf.shape[:2]
    stroke = np.zeros((h, w), dtype=np.uint8)
    thickness = max(1, int(round(_GUIDE_WIDTH * pixel_ratio)))
    for p0, p1 in dash_segments(bleed_px, _GUIDE_DASH * pixel_ratio, _GUIDE_GAP * pixel_ratio):
        cv2.line(stroke, _fixed(p0), _fixed(p1), 255, thickness, cv2.LINE_AA, _SHIFT)

    coverage = stroke.astype(np.float32) / 255.0 * _GUIDE_ALPHA
    layer = solid_bgra(h, w, _WHITE)
    return alpha_composite(buf, layer, coverage)
