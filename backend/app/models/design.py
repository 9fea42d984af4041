# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Design Data Models
Pydantic models for one buyer's customization: the chosen texture,
the optional artwork bitmap, and the artwork transform.

All models are frozen. The interaction controller replaces the
DesignState wholesale on every mutation; nothing mutates in place.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Transform invariants. The controller clamps into these ranges;
# the models only reject values outside them.
SCALE_MIN = 0.2
SCALE_MAX = 3.0
ROTATION_MIN = -180.0
ROTATION_MAX = 180.0
DEFAULT_SCALE = 1.5

# Fill used when a texture has neither a decoded image nor a fallback colour
DEFAULT_TEXTURE_FILL = "#eceff1"


class Texture(BaseModel):
    """Immutable catalog entry for a lid base texture."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    display_name: str
    price_delta: float = Field(0.0, ge=0.0)
    # http(s) or data: URL, or a path relative to the static root / asset base URL
    image_ref: Optional[str] = None
    fallback_color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")

    @property
    def fill_color(self) -> str:
        return self.fallback_color or DEFAULT_TEXTURE_FILL


class Transform(BaseModel):
    """Placement of the artwork layer relative to the safe-area centre."""
    model_config = ConfigDict(frozen=True)

    translate_x: float = 0.0
    translate_y: float = 0.0
    # Default is above 1 so the artwork fills the lid out of the box
    scale: float = Field(DEFAULT_SCALE, ge=SCALE_MIN, le=SCALE_MAX)
    rotation_degrees: float = Field(0.0, ge=ROTATION_MIN, le=ROTATION_MAX)


DEFAULT_TRANSFORM = Transform()


class ArtworkAsset(BaseModel):
    """
    A decoded user upload. Replaced wholesale on every new upload,
    never edited.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # BGRA uint8 numpy array (H×W×4), alpha preserved from the source file
    bitmap: Any = Field(..., description="np.ndarray BGRA artwork pixels")
    natural_width: int = Field(..., gt=0)
    natural_height: int = Field(..., gt=0)
    source_format: Optional[str] = None

    @property
    def natural_size(self) -> tuple[int, int]:
        return self.natural_width, self.natural_height


class DesignState(BaseModel):
    """Complete description of the current customization."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    chosen_texture: Texture
    artwork: Optional[ArtworkAsset] = None
    transform: Transform = DEFAULT_TRANSFORM

    def replace(self, **changes: Any) -> "DesignState":
        """Return a new state with the given fields swapped out."""
        return self.model_copy(update=changes)


def unit_price(state: DesignState, base_price: float) -> float:
    """Base price plus the selected texture's surcharge."""
    return round(base_price + state.chosen_texture.price_delta, 2)
