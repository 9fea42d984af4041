# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 2 — Geometry / transform tests.
Pure math: clamping, scaling helpers, artwork placement, and the
affine matrix fed to cv2.warpAffine.
"""

import math

import numpy as np
import pytest

from app.models.design import Transform

SAFE = 640 - 2 * 28   # 584


# ─── Scaling Helpers ─────────────────────────────────────────────────────────

def test_fit_scale_keeps_inside():
    from app.utils.geometry_utils import fit_scale
    assert fit_scale(4000, 2000, 584, 584) == pytest.approx(0.146)
    assert fit_scale(100, 100, 584, 584) == pytest.approx(5.84)


def test_cover_scale_fills():
    from app.utils.geometry_utils import cover_scale
    assert cover_scale(4000, 2000, 584, 584) == pytest.approx(0.292)


def test_cover_rect_centred():
    from app.utils.geometry_utils import cover_rect
    x, y, w, h = cover_rect(200, 100, (28.0, 28.0, 584.0, 584.0))
    assert h == pytest.approx(584.0)
    assert w == pytest.approx(1168.0)
    # Horizontal overflow split evenly
    assert x == pytest.approx(28.0 - 292.0)
    assert y == pytest.approx(28.0)


def test_clamp_pixel_ratio():
    from app.utils.geometry_utils import clamp_pixel_ratio
    assert clamp_pixel_ratio(None) == 1.0
    assert clamp_pixel_ratio(0) == 1.0
    assert clamp_pixel_ratio(-2) == 1.0
    assert clamp_pixel_ratio(float("nan")) == 1.0
    assert clamp_pixel_ratio(float("inf")) == 1.0
    assert clamp_pixel_ratio(0.5) == 1.0
    assert clamp_pixel_ratio(1.5) == 1.5
    assert clamp_pixel_ratio(3.0) == 2.0


def test_inset_and_scale_rect():
    from app.utils.geometry_utils import inset_rect, scale_rect
    assert inset_rect((0, 0, 640, 640), 28) == (28, 28, 584, 584)
    assert scale_rect((28, 28, 584, 584), 2) == (56, 56, 1168, 1168)


def test_rotate_point_clockwise_on_screen():
    from app.utils.geometry_utils import rotate_point
    # +x axis turns towards +y (down) for a positive angle
    x, y = rotate_point(1.0, 0.0, 0.0, 0.0, 90.0)
    assert x == pytest.approx(0.0, abs=1e-9)
    assert y == pytest.approx(1.0)


# ─── Transform Clamping ──────────────────────────────────────────────────────

def test_clamp_scale():
    from app.modules.geometry import clamp_scale
    assert clamp_scale(10) == 3.0
    assert clamp_scale(0) == 0.2
    assert clamp_scale(-1) == 0.2
    assert clamp_scale(1.25) == 1.25


@pytest.mark.parametrize("raw, expected", [
    (0, 0),
    (45, 45),
    (180, 180),
    (-180, -180),
    (190, -170),
    (-190, 170),
    (360, 0),
    (540, 180),
    (725, 5),
])
def test_normalize_rotation(raw, expected):
    from app.modules.geometry import normalize_rotation
    assert normalize_rotation(raw) == pytest.approx(expected)


def test_clamped_transform_is_valid():
    from app.modules.geometry import clamped_transform
    t = clamped_transform(-900, 1200, 99, 400)
    assert t.translate_x == -900
    assert t.translate_y == 1200
    assert t.scale == 3.0
    assert t.rotation_degrees == pytest.approx(40)


def test_transform_model_rejects_out_of_range():
    from pydantic import ValidationError
    with pytest.raises(ValidationError):
        Transform(scale=5.0)
    with pytest.raises(ValidationError):
        Transform(rotation_degrees=200)


def test_transform_defaults():
    t = Transform()
    assert (t.translate_x, t.translate_y, t.scale, t.rotation_degrees) == (0, 0, 1.5, 0)


# ─── Placement ───────────────────────────────────────────────────────────────

def test_placement_fit_times_scale():
    from app.modules.geometry import compute_placement
    p = compute_placement(Transform(scale=1.0), (4000, 2000), (SAFE, SAFE))
    assert p.width == pytest.approx(584.0)
    assert p.height == pytest.approx(292.0)
    assert (p.center_x, p.center_y) == (292.0, 292.0)


def test_placement_translation_offsets_centre():
    from app.modules.geometry import compute_placement
    p = compute_placement(Transform(translate_x=40, translate_y=-25), (100, 100), (SAFE, SAFE))
    assert p.center_x == pytest.approx(332.0)
    assert p.center_y == pytest.approx(267.0)


def test_placement_rotation_swaps_bounds():
    """4000×2000 at scale 1: bounds swap between 0° and 90°."""
    from app.modules.geometry import compute_placement
    flat = compute_placement(Transform(scale=1.0), (4000, 2000), (SAFE, SAFE))
    turned = compute_placement(
        Transform(scale=1.0, rotation_degrees=90), (4000, 2000), (SAFE, SAFE)
    )

    _, _, fw, fh = flat.bounds()
    _, _, tw, th = turned.bounds()
    assert (fw, fh) == (pytest.approx(584.0), pytest.approx(292.0))
    assert tw == pytest.approx(fh)
    assert th == pytest.approx(fw)


def test_placement_corners_turn_clockwise():
    from app.modules.geometry import compute_placement
    p = compute_placement(Transform(scale=1.0, rotation_degrees=90), (200, 100), (SAFE, SAFE))
    tl = p.corners()[0]
    # Top-left corner swings round to the upper right of the centre
    assert tl[0] > p.center_x
    assert tl[1] < p.center_y


def test_placement_rejects_empty_artwork():
    from app.modules.geometry import compute_placement
    with pytest.raises(ValueError):
        compute_placement(Transform(), (0, 10), (SAFE, SAFE))


def test_affine_matrix_maps_centre():
    from app.modules.geometry import compute_placement
    p = compute_placement(Transform(rotation_degrees=30), (201, 101), (SAFE, SAFE))
    m = p.affine_matrix(origin=(28.0, 28.0), pixel_ratio=2.0)

    src_centre = np.array([(201 - 1) / 2.0, (101 - 1) / 2.0, 1.0])
    dst = m @ src_centre
    # Surface centre (320, 320) at 2× in pixel-index coordinates
    assert dst[0] == pytest.approx(640.0 - 0.5)
    assert dst[1] == pytest.approx(640.0 - 0.5)


def test_affine_matrix_scale_and_rotation():
    from app.modules.geometry import compute_placement
    p = compute_placement(Transform(scale=1.0, rotation_degrees=90), (584, 584), (SAFE, SAFE))
    m = p.affine_matrix()
    # One source pixel to the right lands one pixel further down
    step = m[:, :2] @ np.array([1.0, 0.0])
    assert step[0] == pytest.approx(0.0, abs=1e-9)
    assert step[1] == pytest.approx(1.0)
    assert math.isclose(p.scale_factor, 1.0)
