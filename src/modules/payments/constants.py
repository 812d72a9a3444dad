"""Payment domain constants (statuses as reported by the provider)."""

from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    WAITING_FOR_CAPTURE = "waiting_for_capture", "Waiting for capture"
    SUCCEEDED = "succeeded", "Succeeded"
    CANCELED = "canceled", "Canceled"


# A payment in one of these statuses never changes again.
TERMINAL_PAYMENT_STATUSES: set[str] = {
    PaymentStatus.SUCCEEDED,
    PaymentStatus.CANCELED,
}
