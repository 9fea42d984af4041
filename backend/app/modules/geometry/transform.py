# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Transform Clamping
Pure helpers that bring raw slider / API numbers into the Transform
invariants: scale in [0.2, 3.0], rotation wrapped into [-180, 180].
"""

from __future__ import annotations

import math

from app.models.design import (
    ROTATION_MAX,
    SCALE_MAX,
    SCALE_MIN,
    Transform,
)


def clamp_scale(value: float) -> float:
    return max(SCALE_MIN, min(SCALE_MAX, float(value)))


def normalize_rotation(degrees: float) -> float:
    """
    Wrap an angle into [-180, 180] without changing its visual meaning.
    +180 is kept as +180 so a slider at its right stop stays there.
    """
    deg = float(degrees)
    if -ROTATION_MAX <= deg <= ROTATION_MAX:
        return deg
    wrapped = math.fmod(deg + ROTATION_MAX, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    wrapped -= ROTATION_MAX
    if wrapped == -ROTATION_MAX and deg > 0:
        return ROTATION_MAX
    return wrapped


def clamped_transform(
    translate_x: float,
    translate_y: float,
    scale: float,
    rotation_degrees: float,
) -> Transform:
    """Build a Transform from raw numbers, clamping where needed."""
    return Transform(
        translate_x=float(translate_x),
        translate_y=float(translate_y),
        scale=clamp_scale(scale),
        rotation_degrees=normalize_rotation(rotation_degrees),
    )
