"""Plain-text order status emails."""

from __future__ import annotations

from typing import Tuple

from modules.orders.constants import OrderStatus

STATUS_MESSAGES = {
    OrderStatus.CREATED: "We have received your order and will process it shortly.",
    OrderStatus.PROCESSING: "Your order is being prepared.",
    OrderStatus.SHIPPED: "Your order has been shipped.",
    OrderStatus.DELIVERED: "Your order has been delivered. Thank you!",
    OrderStatus.CANCELLED: "Your order has been cancelled.",
}


def build_status_email(order_number: str, status: str) -> Tuple[str, str]:
    """Return ``(subject, body)`` for an order status update."""
    try:
        label = OrderStatus(status).label
    except ValueError:
        label = status
    subject = f"Order {order_number}: {label}"
    body = "\n\n".join(
        [
            "Hello,",
            f"The status of your order {order_number} is now: {label}.",
            STATUS_MESSAGES.get(status, ""),
            "Grape Shop",
        ]
    )
    return subject, body
