"""Payment gateway adapters and the factory choosing one from settings."""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from modules.payments.gateway.fake import FakeGateway
from modules.payments.gateway.port import PaymentGateway, PaymentIntent
from modules.payments.gateway.yookassa import YooKassaGateway

__all__ = [
    "FakeGateway",
    "PaymentGateway",
    "PaymentIntent",
    "YooKassaGateway",
    "build_gateway",
]


def build_gateway() -> PaymentGateway:
    """Instantiate the adapter named by ``PAYMENT_GATEWAY``."""
    name = settings.PAYMENT_GATEWAY
    if name == "fake":
        return FakeGateway()
    if name == "yookassa":
        if not (settings.YOOKASSA_SHOP_ID and settings.YOOKASSA_SECRET_KEY):
            raise ImproperlyConfigured(
                "YOOKASSA_SHOP_ID and YOOKASSA_SECRET_KEY must be set."
            )
        return YooKassaGateway(
            shop_id=settings.YOOKASSA_SHOP_ID,
            secret_key=settings.YOOKASSA_SECRET_KEY,
            base_url=settings.YOOKASSA_API_URL,
            timeout=settings.YOOKASSA_TIMEOUT_SECONDS,
        )
    raise ImproperlyConfigured(f"Unknown PAYMENT_GATEWAY {name!r}.")
