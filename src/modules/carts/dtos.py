"""Cart DTOs for the Service Layer.

Immutable Pydantic v2 models exchanged between the API views and
``CartService``.

- ``AddCartItemDTO`` / ``UpdateCartItemDTO``: inputs.
- ``CartViewDTO``: the priced cart returned by every cart operation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.products.constants import ProductVariant

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class AddCartItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    variant: ProductVariant
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if not 1 <= v <= MAX_LINE_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {MAX_LINE_QUANTITY}.")
        return v


class UpdateCartItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if not 1 <= v <= MAX_LINE_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {MAX_LINE_QUANTITY}.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CartProductDTO(BaseModel):
    """Catalogue fields shown next to a cart line."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    image_url: Optional[str] = None
    variety: str = ""
    berry_shape: str = ""
    color: str = ""
    taste: str = ""


class CartLineDTO(BaseModel):
    """A cart line priced at the current catalogue price.

    ``unit_price`` and ``subtotal`` are ``None`` when the variant is no
    longer offered; such lines are flagged ``available=False``.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    product: CartProductDTO
    variant: str
    quantity: int
    unit_price: Optional[Decimal]
    subtotal: Optional[Decimal]
    available: bool


class CartViewDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[CartLineDTO]
    total_price: Decimal
    total_items: int
