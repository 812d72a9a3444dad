"""Favorite products of a user or a guest."""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import SINGLE_OWNER, BaseModel


class Favorite(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="favorites",
    )
    guest_id = models.CharField(  # noqa: DJ01
        max_length=64, null=True, blank=True, db_index=True
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="favorited_by",
    )

    class Meta:
        db_table = "favorites"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=SINGLE_OWNER,
                name="favorites_single_owner",
            ),
            models.UniqueConstraint(
                fields=["user", "product"],
                condition=models.Q(user__isnull=False),
                name="favorites_user_product_unique",
            ),
            models.UniqueConstraint(
                fields=["guest_id", "product"],
                condition=models.Q(guest_id__isnull=False),
                name="favorites_guest_product_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id or self.guest_id} -> {self.product_id}"
