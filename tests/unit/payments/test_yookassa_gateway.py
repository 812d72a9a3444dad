from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest
import requests

from modules.payments.exceptions import PaymentGatewayError
from modules.payments.gateway import FakeGateway, YooKassaGateway, build_gateway

pytestmark = pytest.mark.unit

PAYMENT_BODY = {
    "id": "2d5c6f2a-000f-5000-9000-1b68e7b15f3f",
    "status": "pending",
    "paid": False,
    "amount": {"value": "300.00", "currency": "RUB"},
    "confirmation": {
        "type": "redirect",
        "confirmation_url": "https://yoomoney.ru/checkout/payments/v2/contract",
    },
    "description": "Order ORD-1",
    "metadata": {"order_id": "abc"},
    "test": True,
}


def response(status_code=200, body=None):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = body if body is not None else PAYMENT_BODY
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


@pytest.fixture()
def gateway():
    return YooKassaGateway(shop_id="shop", secret_key="secret", timeout=3)


class TestCreatePayment:
    def test_posts_payment(self, gateway):
        with mock.patch(
            "modules.payments.gateway.yookassa.requests.request",
            return_value=response(),
        ) as request:
            intent = gateway.create_payment(
                amount=Decimal("300"),
                currency="RUB",
                description="Order ORD-1",
                metadata={"order_id": "abc"},
                idempotence_key="key-1",
                return_url="https://shop.local/return",
            )

        args, kwargs = request.call_args
        assert args == ("POST", "https://api.yookassa.ru/v3/payments")
        assert kwargs["auth"] == ("shop", "secret")
        assert kwargs["timeout"] == 3
        assert kwargs["headers"] == {"Idempotence-Key": "key-1"}
        assert kwargs["json"]["amount"] == {"value": "300.00", "currency": "RUB"}
        confirmation = kwargs["json"]["confirmation"]
        assert confirmation["return_url"] == "https://shop.local/return"

        assert intent.provider_payment_id == PAYMENT_BODY["id"]
        assert intent.amount == Decimal("300.00")
        assert intent.confirmation_url.startswith("https://yoomoney.ru/")
        assert intent.test is True

    def test_http_error_is_not_retried(self, gateway):
        with mock.patch(
            "modules.payments.gateway.yookassa.requests.request",
            return_value=response(status_code=400, body={}),
        ) as request:
            with pytest.raises(PaymentGatewayError):
                gateway.get_payment("missing")
        assert request.call_count == 1

    def test_connection_errors_are_retried(self, gateway):
        with mock.patch(
            "modules.payments.gateway.yookassa.requests.request",
            side_effect=[requests.ConnectionError("reset"), response()],
        ) as request:
            intent = gateway.get_payment(PAYMENT_BODY["id"])
        assert request.call_count == 2
        assert intent.status == "pending"

    def test_gives_up_after_three_attempts(self, gateway):
        with mock.patch(
            "modules.payments.gateway.yookassa.requests.request",
            side_effect=requests.Timeout("slow"),
        ) as request:
            with pytest.raises(PaymentGatewayError):
                gateway.get_payment(PAYMENT_BODY["id"])
        assert request.call_count == 3


class TestBuildGateway:
    def test_fake_by_default(self, settings):
        settings.PAYMENT_GATEWAY = "fake"
        assert isinstance(build_gateway(), FakeGateway)

    def test_yookassa(self, settings):
        settings.PAYMENT_GATEWAY = "yookassa"
        settings.YOOKASSA_SHOP_ID = "shop"
        settings.YOOKASSA_SECRET_KEY = "secret"
        assert isinstance(build_gateway(), YooKassaGateway)

    def test_yookassa_without_credentials(self, settings):
        from django.core.exceptions import ImproperlyConfigured

        settings.PAYMENT_GATEWAY = "yookassa"
        settings.YOOKASSA_SHOP_ID = ""
        with pytest.raises(ImproperlyConfigured):
            build_gateway()
