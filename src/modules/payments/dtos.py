"""Payment DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from modules.payments.constants import PaymentStatus


class CreatePaymentDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    idempotence_key: Optional[str] = None


class PaymentCallbackDTO(BaseModel):
    """Provider notification reduced to what the mirror row stores."""

    model_config = ConfigDict(frozen=True)

    provider_payment_id: str = Field(min_length=1)
    status: PaymentStatus
    paid: bool = False
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    description: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    test: bool = False
    event: str = ""
