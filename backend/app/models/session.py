# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Session API Schemas
Request and response bodies for the /sessions endpoints.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.design import Transform


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


class TextureSummary(BaseModel):
    """Catalog entry as shown in the texture picker."""
    id: str
    display_name: str
    price_delta: float
    unit_price: float
    has_image: bool
    fallback_color: Optional[str] = None


class SessionSummary(BaseModel):
    """Current design state, minus the bitmaps."""
    session_id: str
    texture_id: str
    texture_name: str
    unit_price: float
    currency: str
    transform: Transform
    has_artwork: bool
    artwork_size: Optional[tuple[int, int]] = None
    pixel_ratio: float
    surface_size: int
    backing_size: tuple[int, int]
    render_count: int
    dragging: bool
    snapshot_available: bool
    warnings: list[str] = Field(default_factory=list)


# ─── API Request/Response Schemas ────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""
    pixel_ratio: Optional[float] = Field(
        None, description="Device pixel ratio; clamped to [1, 2]"
    )
    texture_id: Optional[str] = None


class TextureChangeRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/texture."""
    texture_id: str


class TransformUpdateRequest(BaseModel):
    """Request body for PATCH /sessions/{session_id}/transform (slider input)."""
    scale: Optional[float] = None
    rotation_degrees: Optional[float] = None


class PointerEventRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/pointer."""
    kind: PointerKind
    # Logical surface coordinates; ignored for up/leave
    x: float = 0.0
    y: float = 0.0


class SnapshotResponse(BaseModel):
    """Response body for POST /sessions/{session_id}/snapshot."""
    session_id: str
    width: int
    height: int
    preview: str = Field(..., description="data:image/png;base64,... encoding")
    preview_url: Optional[str] = None
