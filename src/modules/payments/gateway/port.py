"""Payment gateway port (abstract interface).

Defines the contract that payment provider adapters implement, so the
``FakeGateway`` (development/tests) and ``YooKassaGateway`` (production)
are interchangeable without touching the service layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PaymentIntent:
    """Provider-side state of a payment."""

    provider_payment_id: str
    status: str
    paid: bool
    amount: Decimal
    currency: str
    description: str = ""
    confirmation_url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    test: bool = False


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        metadata: Dict[str, Any],
        idempotence_key: str,
        return_url: str,
    ) -> PaymentIntent:
        """Ask the provider to open a payment.

        Raises:
            PaymentGatewayError: the provider failed or rejected the request.
        """

    @abstractmethod
    def get_payment(self, provider_payment_id: str) -> PaymentIntent:
        """Fetch the provider's current view of a payment.

        Raises:
            PaymentGatewayError: the provider failed or rejected the request.
        """
