"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: input for checkout (the cart supplies the items).
- ``UpdateOrderStatusDTO``: input for admin status changes.
- ``LinkGuestOrdersResultDTO``: output of guest order linking.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.constants import OrderStatus

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for checkout requests.

    ``contact_email`` is mandatory for guests; for users it defaults to
    the account email.
    """

    model_config = ConfigDict(frozen=True)

    contact_email: Optional[str] = None
    notes: str = ""
    idempotency_key: Optional[str] = None

    @field_validator("contact_email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    notes: str = ""


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class LinkGuestOrdersResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    linked_orders: int
    order_ids: List[UUID]
