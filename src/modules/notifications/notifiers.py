"""Order notification ports.

``OrderService`` talks to an ``OrderNotifier``; the production adapter
queues a Celery task so no SMTP call ever runs inside a request
transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from modules.notifications.tasks import send_order_status_email

logger = structlog.get_logger(__name__)


class OrderNotifier(ABC):
    @abstractmethod
    def order_status_changed(self, email: str, order_number: str, status: str) -> None:
        """Tell the customer their order moved to *status*."""


class EmailOrderNotifier(OrderNotifier):
    def order_status_changed(self, email: str, order_number: str, status: str) -> None:
        send_order_status_email.delay(email, order_number, status)
        logger.info(
            "notification.email_queued", order_number=order_number, status=status
        )
