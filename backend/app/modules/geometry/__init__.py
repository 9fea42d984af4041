# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Geometry Module
Public API for transform clamping and artwork placement.
"""

from app.modules.geometry.placement import Placement, compute_placement
from app.modules.geometry.transform import (
    clamp_scale,
    clamped_transform,
    normalize_rotation,
)

__all__ = [
    "Placement",
    "compute_placement",
    "clamp_scale",
    "normalize_rotation",
    "clamped_transform",
]
