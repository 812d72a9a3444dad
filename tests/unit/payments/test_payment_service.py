"""Unit tests for PaymentService.

Covers:
- Opening a payment: owner only, payable statuses only, open payments reused,
  provider idempotence key derived from the order attempt.
- Callbacks: idempotent upsert, out-of-order and duplicate deliveries,
  terminal statuses never regress, unknown payments adopt their owner
  from the metadata.
- The order status is never changed by a payment.
"""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest

from modules.core.access import GuestActor, UserActor
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.payments.constants import PaymentStatus
from modules.payments.dtos import CreatePaymentDTO, PaymentCallbackDTO
from modules.payments.exceptions import (
    PaymentAccessDenied,
    PaymentGatewayError,
    PaymentNotAllowed,
    PaymentNotFound,
    PaymentOwnerUnresolved,
)
from modules.payments.gateway.fake import FakeGateway
from modules.payments.models import Payment
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.payments.services import PaymentService

pytestmark = pytest.mark.unit


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def payment_service(gateway):
    return PaymentService(
        payment_repository=PaymentDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        gateway=gateway,
    )


def callback(provider_id, status, **extra):
    return PaymentCallbackDTO(
        provider_payment_id=provider_id,
        status=status,
        paid=status == PaymentStatus.SUCCEEDED,
        **extra,
    )


# ---------------------------------------------------------------------------
# create_payment
# ---------------------------------------------------------------------------


class TestCreatePayment:
    def test_opens_payment_for_order(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)

        payment = payment_service.create_payment(
            user_actor, CreatePaymentDTO(order_id=order.id)
        )

        assert payment.provider_payment_id.startswith("fake_")
        assert payment.order_id == order.id
        assert payment.user_id == user_actor.id
        assert payment.amount == Decimal("300.00")
        assert payment.status == PaymentStatus.PENDING
        assert payment.confirmation_url
        assert gateway.calls[0]["metadata"]["order_id"] == str(order.id)

    def test_guest_payment_owned_by_guest(
        self, payment_service, place_order, guest_actor
    ):
        order = place_order(guest_actor)
        payment = payment_service.create_payment(
            guest_actor, CreatePaymentDTO(order_id=order.id)
        )
        assert payment.guest_id == guest_actor.guest_id
        assert payment.user_id is None

    def test_open_payment_is_reused(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)
        dto = CreatePaymentDTO(order_id=order.id)

        first = payment_service.create_payment(user_actor, dto)
        second = payment_service.create_payment(user_actor, dto)

        assert first.pk == second.pk
        assert len(gateway.calls) == 1

    def test_provider_key_follows_order_attempts(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)
        dto = CreatePaymentDTO(order_id=order.id)

        first = payment_service.create_payment(user_actor, dto)
        payment_service.apply_callback(
            callback(first.provider_payment_id, PaymentStatus.CANCELED)
        )
        second = payment_service.create_payment(user_actor, dto)

        keys = [call["idempotence_key"] for call in gateway.calls]
        assert keys == [f"order-{order.id}-0", f"order-{order.id}-1"]
        assert first.pk != second.pk

    def test_client_key_is_forwarded(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)
        payment_service.create_payment(
            user_actor, CreatePaymentDTO(order_id=order.id, idempotence_key="k-1")
        )
        assert gateway.calls[0]["idempotence_key"] == "k-1"

    def test_racing_requests_keep_one_payment(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)
        dto = CreatePaymentDTO(order_id=order.id)

        # Both requests pass the reuse check before either records a row.
        with mock.patch.object(
            PaymentDjangoRepository, "open_for_order", return_value=None
        ), mock.patch.object(
            PaymentDjangoRepository, "count_for_order", return_value=0
        ):
            first = payment_service.create_payment(user_actor, dto)
            second = payment_service.create_payment(user_actor, dto)

        assert len(gateway.calls) == 2
        assert first.pk == second.pk
        assert Payment.objects.count() == 1

    def test_stranger_denied(
        self, payment_service, gateway, place_order, user_actor, guest_actor
    ):
        order = place_order(user_actor)
        with pytest.raises(PaymentAccessDenied):
            payment_service.create_payment(
                guest_actor, CreatePaymentDTO(order_id=order.id)
            )
        assert gateway.calls == []

    def test_cancelled_order_cannot_be_paid(
        self, payment_service, order_service, place_order, user_actor
    ):
        order = place_order(user_actor)
        order_service.cancel_order(order.id, user_actor)

        with pytest.raises(PaymentNotAllowed):
            payment_service.create_payment(
                user_actor, CreatePaymentDTO(order_id=order.id)
            )

    def test_unknown_order(self, payment_service, user_actor):
        with pytest.raises(OrderNotFound):
            payment_service.create_payment(
                user_actor,
                CreatePaymentDTO(order_id="0190a000-0000-7000-8000-000000000000"),
            )

    def test_gateway_failure_leaves_no_row(
        self, payment_service, gateway, place_order, user_actor
    ):
        order = place_order(user_actor)
        gateway.configure(should_fail=True)

        with pytest.raises(PaymentGatewayError) as exc_info:
            payment_service.create_payment(
                user_actor, CreatePaymentDTO(order_id=order.id)
            )

        assert exc_info.value.status_code == 502
        assert not Payment.objects.exists()


# ---------------------------------------------------------------------------
# apply_callback
# ---------------------------------------------------------------------------


@pytest.fixture()
def open_payment(payment_service, place_order, user_actor):
    order = place_order(user_actor)
    return payment_service.create_payment(
        user_actor, CreatePaymentDTO(order_id=order.id)
    )


class TestApplyCallback:
    def test_success_marks_paid(self, payment_service, open_payment):
        payment = payment_service.apply_callback(
            callback(open_payment.provider_payment_id, PaymentStatus.SUCCEEDED)
        )

        assert payment.status == PaymentStatus.SUCCEEDED
        assert payment.paid is True
        assert Payment.objects.count() == 1

    def test_settled_provider_payment_is_mirrored(
        self, payment_service, gateway, open_payment
    ):
        pid = open_payment.provider_payment_id
        intent = gateway.settle(pid, PaymentStatus.SUCCEEDED)

        payment = payment_service.apply_callback(
            callback(intent.provider_payment_id, intent.status)
        )

        assert gateway.get_payment(pid).paid is True
        assert payment.status == PaymentStatus.SUCCEEDED
        assert payment.paid is True

    def test_duplicate_delivery_is_harmless(self, payment_service, open_payment):
        dto = callback(open_payment.provider_payment_id, PaymentStatus.SUCCEEDED)

        payment_service.apply_callback(dto)
        payment = payment_service.apply_callback(dto)

        assert payment.status == PaymentStatus.SUCCEEDED
        assert Payment.objects.count() == 1

    @pytest.mark.parametrize(
        "terminal", [PaymentStatus.SUCCEEDED, PaymentStatus.CANCELED]
    )
    @pytest.mark.parametrize(
        "late",
        [
            PaymentStatus.PENDING,
            PaymentStatus.WAITING_FOR_CAPTURE,
            PaymentStatus.SUCCEEDED,
            PaymentStatus.CANCELED,
        ],
    )
    def test_terminal_status_never_changes(
        self, payment_service, open_payment, terminal, late
    ):
        pid = open_payment.provider_payment_id
        payment_service.apply_callback(callback(pid, terminal))

        payment_service.apply_callback(callback(pid, late))

        assert Payment.objects.get(provider_payment_id=pid).status == terminal

    def test_waiting_does_not_fall_back_to_pending(
        self, payment_service, open_payment
    ):
        pid = open_payment.provider_payment_id
        payment_service.apply_callback(callback(pid, PaymentStatus.WAITING_FOR_CAPTURE))
        payment_service.apply_callback(callback(pid, PaymentStatus.PENDING))

        status = Payment.objects.get(provider_payment_id=pid).status
        assert status == PaymentStatus.WAITING_FOR_CAPTURE

    def test_order_status_unchanged(self, payment_service, open_payment):
        payment_service.apply_callback(
            callback(open_payment.provider_payment_id, PaymentStatus.SUCCEEDED)
        )
        order = Order.objects.get(pk=open_payment.order_id)
        assert order.status == OrderStatus.CREATED


class TestCallbackForUnknownPayment:
    def test_owner_taken_from_order_metadata(
        self, payment_service, place_order, guest_actor
    ):
        order = place_order(guest_actor)

        payment = payment_service.apply_callback(
            callback(
                "yk_early",
                PaymentStatus.SUCCEEDED,
                amount=Decimal("300.00"),
                currency="RUB",
                metadata={"order_id": str(order.id)},
            )
        )

        assert payment.order_id == order.id
        assert payment.guest_id == guest_actor.guest_id
        assert payment.user_id is None
        assert payment.amount == Decimal("300.00")

    def test_owner_taken_from_user_metadata(self, payment_service, user):
        payment = payment_service.apply_callback(
            callback(
                "yk_user", PaymentStatus.PENDING, metadata={"user_id": str(user.pk)}
            )
        )
        assert payment.user_id == user.pk
        assert payment.order_id is None

    def test_no_owner_rejected(self, payment_service):
        with pytest.raises(PaymentOwnerUnresolved):
            payment_service.apply_callback(
                callback("yk_orphan", PaymentStatus.SUCCEEDED)
            )
        assert not Payment.objects.exists()


# ---------------------------------------------------------------------------
# get_payment
# ---------------------------------------------------------------------------


class TestGetPayment:
    def test_owner_reads(self, payment_service, open_payment, user_actor):
        payment = payment_service.get_payment(
            open_payment.provider_payment_id, user_actor
        )
        assert payment.pk == open_payment.pk

    def test_admin_reads(self, payment_service, open_payment, staff_actor):
        payment = payment_service.get_payment(
            open_payment.provider_payment_id, staff_actor
        )
        assert payment.pk == open_payment.pk

    def test_stranger_denied(self, payment_service, open_payment, other_user):
        with pytest.raises(PaymentAccessDenied):
            payment_service.get_payment(
                open_payment.provider_payment_id, UserActor(id=other_user.pk)
            )

    def test_unknown(self, payment_service):
        with pytest.raises(PaymentNotFound):
            payment_service.get_payment(
                "fake_missing", GuestActor(guest_id="guest_" + "1" * 32)
            )
