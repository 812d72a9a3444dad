"""YooKassa payment gateway adapter.

Talks to the YooKassa REST API (``/payments``) with HTTP basic auth
(shop id / secret key).  Every create request carries an
``Idempotence-Key`` so a retried call never opens a second payment.
Transport errors are retried with exponential back-off; HTTP error
responses are not.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

import requests
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from modules.payments.exceptions import PaymentGatewayError
from modules.payments.gateway.port import PaymentGateway, PaymentIntent

logger = structlog.get_logger(__name__)

TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
    )


class YooKassaGateway(PaymentGateway):
    def __init__(
        self,
        shop_id: str,
        secret_key: str,
        base_url: str = "https://api.yookassa.ru/v3",
        timeout: int = 10,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = (shop_id, secret_key)
        self.timeout = timeout

    def create_payment(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        metadata: Dict[str, Any],
        idempotence_key: str,
        return_url: str,
    ) -> PaymentIntent:
        payload = {
            "amount": {"value": f"{amount:.2f}", "currency": currency},
            "capture": True,
            "confirmation": {"type": "redirect", "return_url": return_url},
            "description": description[:128],
            "metadata": metadata,
        }
        body = self._call(
            "POST",
            "/payments",
            json=payload,
            headers={"Idempotence-Key": idempotence_key},
        )
        return self._to_intent(body)

    def get_payment(self, provider_payment_id: str) -> PaymentIntent:
        return self._to_intent(self._call("GET", f"/payments/{provider_payment_id}"))

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._request(method, url, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except requests.HTTPError as exc:
            logger.error(
                "payment_gateway.http_error",
                url=url,
                status_code=exc.response.status_code,
            )
            raise PaymentGatewayError("Payment provider rejected the request.") from exc
        except (requests.RequestException, ValueError) as exc:
            logger.error("payment_gateway.unavailable", url=url, error=str(exc))
            raise PaymentGatewayError() from exc

    @http_retry()
    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.info("payment_gateway.request", method=method, url=url)
        return requests.request(
            method, url, auth=self.auth, timeout=self.timeout, **kwargs
        )

    @staticmethod
    def _to_intent(body: Dict[str, Any]) -> PaymentIntent:
        amount = body.get("amount") or {}
        confirmation: Optional[dict] = body.get("confirmation") or {}
        return PaymentIntent(
            provider_payment_id=body["id"],
            status=body["status"],
            paid=bool(body.get("paid", False)),
            amount=Decimal(str(amount.get("value", "0"))),
            currency=amount.get("currency", ""),
            description=body.get("description", ""),
            confirmation_url=confirmation.get("confirmation_url"),
            metadata=body.get("metadata") or {},
            test=bool(body.get("test", False)),
        )
