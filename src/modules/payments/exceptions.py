"""Payment domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import (
    BadRequestError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)


class PaymentNotFound(NotFoundError):
    default_detail = "Payment not found."


class PaymentAccessDenied(ForbiddenError):
    default_detail = "You do not have access to this payment."


class PaymentNotAllowed(BadRequestError):
    """The order is not in a status that can be paid."""


class PaymentOwnerUnresolved(BadRequestError):
    """A callback for an unknown payment carries no usable owner."""

    default_detail = "Cannot determine the owner of the payment."


class PaymentGatewayError(DomainError):
    """The payment provider failed or rejected the request."""

    status_code = 502
    default_detail = "Payment provider unavailable."
