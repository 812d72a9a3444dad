from __future__ import annotations

from smtplib import SMTPException
from unittest import mock

import pytest

from modules.notifications.emails import build_status_email
from modules.notifications.notifiers import EmailOrderNotifier
from modules.notifications.tasks import send_order_status_email
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.unit


class TestBuildStatusEmail:
    def test_subject_and_body(self):
        subject, body = build_status_email("ORD-20260101-ABC123", OrderStatus.SHIPPED)

        assert subject == "Order ORD-20260101-ABC123: Shipped"
        assert "ORD-20260101-ABC123" in body
        assert "has been shipped" in body

    def test_unknown_status_falls_back_to_raw_value(self):
        subject, _ = build_status_email("ORD-1", "LOST")
        assert subject == "Order ORD-1: LOST"


class TestSendOrderStatusEmail:
    def test_sends_mail(self, mailoutbox, settings):
        send_order_status_email.delay(
            "buyer@example.com", "ORD-1", OrderStatus.CREATED
        )

        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.to == ["buyer@example.com"]
        assert message.from_email == settings.DEFAULT_FROM_EMAIL
        assert message.subject == "Order ORD-1: Created"

    def test_smtp_failure_is_retried(self):
        with mock.patch(
            "modules.notifications.tasks.send_mail", side_effect=SMTPException("down")
        ) as send_mail:
            with pytest.raises(SMTPException):
                send_order_status_email.delay(
                    "buyer@example.com", "ORD-1", OrderStatus.CREATED
                )
        assert send_mail.call_count > 1


class TestEmailOrderNotifier:
    def test_queues_task(self):
        with mock.patch(
            "modules.notifications.notifiers.send_order_status_email"
        ) as task:
            EmailOrderNotifier().order_status_changed(
                "buyer@example.com", "ORD-1", OrderStatus.CANCELLED
            )
        task.delay.assert_called_once_with(
            "buyer@example.com", "ORD-1", OrderStatus.CANCELLED
        )

    def test_checkout_email_delivered(
        self,
        user_actor,
        fill_cart,
        product,
        mailoutbox,
        django_capture_on_commit_callbacks,
    ):
        from modules.carts.repositories.django_repository import CartDjangoRepository
        from modules.orders.dtos import CreateOrderDTO
        from modules.orders.repositories.django_repository import (
            OrderDjangoRepository,
        )
        from modules.orders.services import OrderService
        from modules.products.repositories.django_repository import (
            ProductDjangoRepository,
        )

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            notifier=EmailOrderNotifier(),
        )
        fill_cart(user_actor, product)

        with django_capture_on_commit_callbacks(execute=True):
            order = service.create_order(user_actor, CreateOrderDTO())

        assert len(mailoutbox) == 1
        assert order.order_number in mailoutbox[0].subject
