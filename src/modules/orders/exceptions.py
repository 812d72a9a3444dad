"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    default_detail = "Order not found."


class OrderAccessDenied(ForbiddenError):
    """The order exists but belongs to another customer."""

    default_detail = "You do not have access to this order."


class AdminRequired(ForbiddenError):
    default_detail = "Administrator privileges required."


class InvalidOrderStatus(BadRequestError):
    """An invalid status transition was attempted."""


class CartEmpty(BadRequestError):
    """An order was requested from an empty cart."""

    default_detail = "Cart is empty."


class ContactEmailRequired(BadRequestError):
    """Guests must leave a contact email to place an order."""

    default_detail = "Contact email is required for guest orders."


class IdempotencyKeyConflict(ConflictError):
    """The idempotency key was already used by another customer."""

    default_detail = "Idempotency key already used."
