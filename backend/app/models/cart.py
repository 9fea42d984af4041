# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Cart Hand-off Models
Shapes exchanged with the external cart and payment collaborators.
The compositor only fills CartItem.preview; persistence and payment
happen elsewhere.
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.design import DesignState, unit_price

CART_ITEM_NAME = "Custom Box Lid"


class CartItem(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = CART_ITEM_NAME
    price: float = Field(..., gt=0)
    qty: int = Field(1, ge=1)
    # data:image/png;base64 snapshot; absent when no snapshot was taken
    preview: Optional[str] = None
    # Persisted snapshot URL; absolute when PUBLIC_BASE_URL is set
    preview_url: Optional[str] = None
    texture_id: str


class CustomerInfo(BaseModel):
    name: str = ""
    email: str = ""
    address: str = ""

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        if v and "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class LineItem(BaseModel):
    """One payment-provider line item. Amounts are in minor units (pence)."""
    name: str
    description: str
    unit_amount: int
    quantity: int
    currency: str
    images: list[str] = Field(default_factory=list)


class CheckoutRequest(BaseModel):
    """Body the payment collaborator accepts to open a checkout session."""
    items: list[CartItem] = Field(..., min_length=1)
    customer_info: CustomerInfo = Field(default_factory=CustomerInfo)

    def line_items(self, currency: str = "gbp") -> list[LineItem]:
        """
        Convert cart items to provider line items.
        Inline data-URL previews are dropped. An absolute preview_url
        (set when PUBLIC_BASE_URL is configured) is forwarded as the image.
        """
        out: list[LineItem] = []
        for item in self.items:
            url = item.preview_url
            images = [url] if url and url.startswith(("http://", "https://")) else []
            out.append(LineItem(
                name=f"STASHBOX - {item.name}",
                description=(
                    f"Custom 3D-printed storage box lid with {item.texture_id} texture"
                ),
                unit_amount=int(round(item.price * 100)),
                quantity=item.qty,
                currency=currency,
                images=images,
            ))
        return out


def build_cart_item(
    state: DesignState,
    base_price: float,
    preview: Optional[str] = None,
    preview_url: Optional[str] = None,
) -> CartItem:
    """Build the cart record for the current design."""
    return CartItem(
        price=unit_price(state, base_price),
        preview=preview,
        preview_url=preview_url,
        texture_id=state.chosen_texture.id,
    )
