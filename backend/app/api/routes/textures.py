# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — GET /textures
Texture picker contents, in catalog order, with the unit price each
choice would give.
"""

from __future__ import annotations

from fastapi import APIRouter

from app.config import get_settings
from app.dependencies import CatalogDep
from app.models.session import TextureSummary

router = APIRouter(tags=["textures"])


@router.get(
    "/textures",
    response_model=list[TextureSummary],
    summary="List lid textures",
)
async def list_textures(catalog: CatalogDep) -> list[TextureSummary]:
    base = get_settings().base_price
    return [
        TextureSummary(
            id=t.id,
            display_name=t.display_name,
            price_delta=t.price_delta,
            unit_price=round(base + t.price_delta, 2),
            has_image=t.image_ref is not None,
            fallback_color=t.fallback_color,
        )
        for t in catalog
    ]
