"""Payment mirror model.

A ``Payment`` row mirrors a payment held by the external provider and is
keyed by the provider's id.  It is created when the shop requests a
payment and updated by provider callbacks; callbacks may arrive late,
twice, or before the local row exists.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from modules.core.models import SINGLE_OWNER, BaseModel
from modules.payments.constants import TERMINAL_PAYMENT_STATUSES, PaymentStatus


class Payment(BaseModel):
    provider_payment_id = models.CharField(max_length=100, unique=True)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    guest_id = models.CharField(  # noqa: DJ01
        max_length=64, null=True, blank=True, db_index=True
    )
    amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    currency = models.CharField(max_length=3, default="RUB")
    status = models.CharField(
        max_length=32,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    paid = models.BooleanField(default=False)
    description = models.CharField(max_length=255, blank=True, default="")
    confirmation_url = models.URLField(max_length=500, blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    test = models.BooleanField(default=False)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="payments_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=SINGLE_OWNER,
                name="payments_single_owner",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES

    def __str__(self) -> str:
        return f"{self.provider_payment_id} ({self.status})"
