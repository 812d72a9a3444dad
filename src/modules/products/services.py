"""Pricing service.

Resolves the current unit price of a (product, variant) pair.  Cart lines
are priced live through this service; orders snapshot its result at
creation time.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog

from modules.products.constants import MONEY_QUANTUM
from modules.products.exceptions import ProductNotFound, VariantUnavailable

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class PricingService:
    """Receives an ``IProductRepository`` via constructor injection (DIP)."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def resolve_unit_price(self, product_id: UUID | str, variant: str) -> Decimal:
        """Return the current unit price for *variant* of a product.

        Raises:
            ProductNotFound: the product does not exist.
            VariantUnavailable: the variant has no price.
        """
        product = self._product_repo.get_by_id(str(product_id))
        if product is None:
            raise ProductNotFound(f"Product {product_id} not found.")
        return self.require_price(product, variant)

    def require_price(self, product: Product, variant: str) -> Decimal:
        """Like ``resolve_unit_price`` for an already loaded product.

        Raises:
            VariantUnavailable: the variant has no price.
        """
        price = self.price_for(product, variant)
        if price is None:
            logger.warning(
                "pricing.variant_unavailable",
                product_id=str(product.id),
                variant=variant,
            )
            raise VariantUnavailable(product.name, str(variant))
        return price

    @staticmethod
    def price_for(product: Product, variant: str) -> Optional[Decimal]:
        """Quantized price of *variant*, or ``None`` when it is not offered."""
        price = product.price_for(variant)
        if price is None:
            return None
        return Decimal(price).quantize(MONEY_QUANTUM)
