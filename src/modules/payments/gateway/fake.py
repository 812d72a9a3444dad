"""In-memory payment gateway for development and tests.

Simulates the provider without network calls.  Payments start
``pending``; ``settle`` moves one to another status the way a provider
callback would report it.  Repeating an idempotence key returns the
payment created by the first call.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict
from uuid import uuid4

from modules.payments.constants import PaymentStatus
from modules.payments.exceptions import PaymentGatewayError
from modules.payments.gateway.port import PaymentGateway, PaymentIntent


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_fail: bool = False
        self.payments: Dict[str, PaymentIntent] = {}
        self._by_key: Dict[str, str] = {}
        self.calls: list[dict] = []

    def configure(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    def create_payment(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        metadata: Dict[str, Any],
        idempotence_key: str,
        return_url: str,
    ) -> PaymentIntent:
        self.calls.append(
            {
                "method": "create_payment",
                "amount": amount,
                "currency": currency,
                "metadata": metadata,
                "idempotence_key": idempotence_key,
            }
        )
        if self.should_fail:
            raise PaymentGatewayError()

        if idempotence_key in self._by_key:
            return self.payments[self._by_key[idempotence_key]]

        provider_id = f"fake_{uuid4().hex}"
        intent = PaymentIntent(
            provider_payment_id=provider_id,
            status=PaymentStatus.PENDING,
            paid=False,
            amount=amount,
            currency=currency,
            description=description,
            confirmation_url=f"https://pay.fake.local/confirm/{provider_id}",
            metadata=dict(metadata),
            test=True,
        )
        self.payments[provider_id] = intent
        self._by_key[idempotence_key] = provider_id
        return intent

    def get_payment(self, provider_payment_id: str) -> PaymentIntent:
        try:
            return self.payments[provider_payment_id]
        except KeyError:
            raise PaymentGatewayError("Unknown payment.") from None

    def settle(self, provider_payment_id: str, status: str) -> PaymentIntent:
        intent = replace(
            self.payments[provider_payment_id],
            status=status,
            paid=status == PaymentStatus.SUCCEEDED,
        )
        self.payments[provider_payment_id] = intent
        return intent
