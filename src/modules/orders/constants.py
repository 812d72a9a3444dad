"""Order domain constants.

Defines status choices and valid status transitions for the order
state machine::

    CREATED -> PROCESSING -> SHIPPED -> DELIVERED
    CREATED | PROCESSING -> CANCELLED
"""

from django.db import models


class OrderStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.CREATED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Once goods have left the warehouse the order can no longer be cancelled.
NON_CANCELLABLE_STATES: set[str] = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}

# Statuses in which a payment may still be started.
PAYABLE_STATES: set[str] = {OrderStatus.CREATED, OrderStatus.PROCESSING}

ORDER_NUMBER_MAX_RETRIES = 5
