# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Compositor Module
Public API for the rendering surface and layer compositor.
"""

from app.modules.compositor.compositor import LayerCompositor, ResolvedAssets, render_frame
from app.modules.compositor.surface import RenderSurface, SurfaceGeometry

__all__ = [
    "LayerCompositor",
    "ResolvedAssets",
    "render_frame",
    "RenderSurface",
    "SurfaceGeometry",
]
