"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BadRequestError, ForbiddenError, NotFoundError


class CartItemNotFound(NotFoundError):
    """The cart line does not exist."""

    default_detail = "Cart item not found."


class CartItemForbidden(ForbiddenError):
    """The cart line exists but belongs to another owner."""

    default_detail = "Cart item belongs to another customer."


class CartQuantityExceeded(BadRequestError):
    """The line quantity would exceed ``MAX_LINE_QUANTITY``."""

    default_detail = "Cart line quantity limit exceeded."
