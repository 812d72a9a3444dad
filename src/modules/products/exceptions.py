"""Product domain exceptions.

Raised by the pricing service when a cart line or an order line cannot
be priced.  The API layer translates them into HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import BadRequestError, NotFoundError


class ProductNotFound(NotFoundError):
    """The requested product does not exist."""

    default_detail = "Product not found."


class VariantUnavailable(BadRequestError):
    """The requested variant has no price and cannot be sold."""

    def __init__(self, product_name: str, variant: str) -> None:
        self.product_name = product_name
        self.variant = variant
        super().__init__(
            f"Variant '{variant}' of product '{product_name}' is not available."
        )
