"""Cart line model.

Business rules implemented:
- A line belongs to exactly one owner: a user or a guest (check constraint).
- At most one line per (owner, product, variant); repeat adds accumulate
  quantity (conditional unique constraints, one per owner kind).
- Quantity is at least 1.
- Lines hold no price: they are priced live from the catalogue.
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SINGLE_OWNER, BaseModel
from modules.products.constants import ProductVariant


class CartItem(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="cart_items",
    )
    guest_id = models.CharField(  # noqa: DJ01
        max_length=64, null=True, blank=True, db_index=True
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    variant = models.CharField(max_length=20, choices=ProductVariant.choices)
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )

    class Meta:
        db_table = "cart_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=SINGLE_OWNER,
                name="cart_items_single_owner",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_items_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["user", "product", "variant"],
                condition=models.Q(user__isnull=False),
                name="cart_items_user_line_unique",
            ),
            models.UniqueConstraint(
                fields=["guest_id", "product", "variant"],
                condition=models.Q(guest_id__isnull=False),
                name="cart_items_guest_line_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} [{self.variant}] x{self.quantity}"
