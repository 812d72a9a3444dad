"""Product catalogue models.

The catalogue is maintained outside this service; the cart and order
code only reads it.  A product is sold in two variants (cutting and
seedling), each with its own nullable price: a ``NULL`` price means the
variant is not currently offered.

Business rules implemented:
- A variant price, when present, must be greater than zero.
- At most one image per product is flagged primary (falls back to the
  oldest image).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.products.constants import VARIANT_PRICE_FIELDS


class Product(BaseModel):
    """Grape variety offered by the shop."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    cutting_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    seedling_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    variety = models.CharField(max_length=100, blank=True, default="")
    maturation_period = models.CharField(max_length=100, blank=True, default="")
    berry_shape = models.CharField(max_length=100, blank=True, default="")
    color = models.CharField(max_length=100, blank=True, default="")
    taste = models.CharField(max_length=255, blank=True, default="")
    in_stock = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(cutting_price__isnull=True)
                | models.Q(cutting_price__gt=0),
                name="products_cutting_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(seedling_price__isnull=True)
                | models.Q(seedling_price__gt=0),
                name="products_seedling_price_positive",
            ),
        ]

    def price_for(self, variant: str) -> Optional[Decimal]:
        """Current price of *variant*, or ``None`` when it is not offered."""
        field = VARIANT_PRICE_FIELDS.get(variant)
        if field is None:
            return None
        return getattr(self, field)

    @property
    def primary_image_url(self) -> Optional[str]:
        """URL of the primary image.

        Iterates ``images.all()`` so a ``prefetch_related("images")`` on
        the queryset avoids one query per product.
        """
        images = list(self.images.all())
        if not images:
            return None
        for image in images:
            if image.is_primary:
                return image.image_url
        return min(images, key=lambda img: img.created_at).image_url

    def __str__(self) -> str:
        return self.name


class ProductImage(BaseModel):
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="images",
    )
    image_url = models.CharField(max_length=500)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = "product_images"
        ordering = ["-is_primary", "created_at"]

    def __str__(self) -> str:
        return self.image_url
