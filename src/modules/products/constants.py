"""Product domain constants."""

from decimal import Decimal

from django.db import models


class ProductVariant(models.TextChoices):
    CUTTING = "cutting", "Cutting"
    SEEDLING = "seedling", "Seedling"


# Maps each variant to the Product field holding its price.
VARIANT_PRICE_FIELDS: dict[str, str] = {
    ProductVariant.CUTTING: "cutting_price",
    ProductVariant.SEEDLING: "seedling_price",
}

MONEY_QUANTUM = Decimal("0.01")
