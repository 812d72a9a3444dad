"""Payment service layer.

Keeps the local ``Payment`` rows in step with the payment provider.

Business rules enforced:
- Only the owner of an order may pay it, and only while the order is
  ``CREATED`` or ``PROCESSING``.  An open payment is reused instead of
  opening a second one.
- The provider is called outside any database transaction; the mirror
  row is upserted afterwards.
- Callbacks are upserts keyed by the provider id under a row lock, so
  duplicates and out-of-order deliveries are harmless.  A status never
  moves backwards and a terminal status (``succeeded``/``canceled``)
  never changes.
- Payment callbacks do not change the order status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction

from modules.core.access import AccessMode, can_access
from modules.orders.constants import PAYABLE_STATES
from modules.orders.exceptions import OrderNotFound
from modules.payments.constants import PaymentStatus
from modules.payments.exceptions import (
    PaymentAccessDenied,
    PaymentNotAllowed,
    PaymentNotFound,
    PaymentOwnerUnresolved,
)

if TYPE_CHECKING:
    from modules.core.access import Actor
    from modules.core.activity import ActivityLogService
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.dtos import CreatePaymentDTO, PaymentCallbackDTO
    from modules.payments.gateway.port import PaymentGateway
    from modules.payments.models import Payment
    from modules.payments.repositories.interfaces import IPaymentRepository

logger = structlog.get_logger(__name__)

# Position of each status in the payment lifecycle; lower never follows higher.
STATUS_RANK: Dict[str, int] = {
    PaymentStatus.PENDING: 0,
    PaymentStatus.WAITING_FOR_CAPTURE: 1,
    PaymentStatus.SUCCEEDED: 2,
    PaymentStatus.CANCELED: 2,
}


class PaymentService:
    def __init__(
        self,
        payment_repository: IPaymentRepository,
        order_repository: IOrderRepository,
        gateway: PaymentGateway,
        activity_log: Optional[ActivityLogService] = None,
    ) -> None:
        self._payment_repo = payment_repository
        self._order_repo = order_repository
        self._gateway = gateway
        self._activity = activity_log

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_payment(self, actor: Actor, dto: CreatePaymentDTO) -> Payment:
        """Open a provider payment for one of the actor's orders.

        The reuse check runs under a lock on the order row; the provider
        call itself runs after that transaction.  Without a client key the
        provider idempotence key is derived from the order and the number
        of payments it already has, so two racing requests ask the
        provider for the same payment and the upsert keeps one row.

        Raises:
            OrderNotFound: the order does not exist.
            PaymentAccessDenied: the actor does not own the order.
            PaymentNotAllowed: the order is past the payable statuses.
            PaymentGatewayError: the provider failed.
        """
        order, existing, attempt = self._claim_order(actor, dto.order_id)
        if existing is not None:
            return existing

        log = logger.bind(order_id=str(order.id), actor=str(actor))
        intent = self._gateway.create_payment(
            amount=order.total_price,
            currency=settings.PAYMENT_CURRENCY,
            description=f"Order {order.order_number}",
            metadata={"order_id": str(order.id), "order_number": order.order_number},
            idempotence_key=dto.idempotence_key or f"order-{order.id}-{attempt}",
            return_url=settings.PAYMENT_RETURN_URL,
        )
        log.info(
            "payment.intent_created",
            provider_payment_id=intent.provider_payment_id,
            amount=str(intent.amount),
        )

        payment = self._upsert(
            intent.provider_payment_id,
            {
                "status": intent.status,
                "paid": intent.paid,
                "amount": intent.amount,
                "currency": intent.currency,
                "description": intent.description,
                "metadata": intent.metadata,
                "test": intent.test,
                "confirmation_url": intent.confirmation_url or "",
            },
            order=order,
        )
        self._record("payment.created", actor, payment)
        return payment

    def apply_callback(self, dto: PaymentCallbackDTO) -> Payment:
        """Apply a provider notification to the mirror row.

        Creates the row when the notification arrives before the local
        insert; the owner then comes from the order named in
        ``metadata.order_id`` (or ``metadata.user_id`` / ``guest_id``).

        Raises:
            PaymentOwnerUnresolved: unknown payment with no usable owner.
        """
        values: Dict[str, Any] = {"status": dto.status, "paid": dto.paid}
        if dto.amount is not None:
            values["amount"] = dto.amount
        if dto.currency:
            values["currency"] = dto.currency
        if dto.description:
            values["description"] = dto.description
        if dto.metadata:
            values["metadata"] = dto.metadata
        if dto.test:
            values["test"] = True

        return self._upsert(dto.provider_payment_id, values, metadata=dto.metadata)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_payment(self, provider_payment_id: str, actor: Actor) -> Payment:
        """Raises PaymentNotFound / PaymentAccessDenied."""
        payment = self._payment_repo.get_by_provider_id(provider_payment_id)
        if payment is None:
            raise PaymentNotFound()
        if not can_access(actor, payment, AccessMode.READ):
            raise PaymentAccessDenied()
        return payment

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @transaction.atomic
    def _claim_order(
        self, actor: Actor, order_id: UUID
    ) -> tuple[Order, Optional[Payment], int]:
        order = self._order_repo.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=str(order.id), actor=str(actor))
        if not can_access(actor, order, AccessMode.WRITE):
            log.warning("payment.access_denied")
            raise PaymentAccessDenied()
        if order.status not in PAYABLE_STATES:
            raise PaymentNotAllowed(
                f"Order in status {order.status} cannot be paid."
            )

        existing = self._payment_repo.open_for_order(order.id)
        if existing is not None:
            log.info("payment.reused", provider_payment_id=existing.provider_payment_id)
        return order, existing, self._payment_repo.count_for_order(order.id)

    @transaction.atomic
    def _upsert(
        self,
        provider_payment_id: str,
        values: Dict[str, Any],
        order: Optional[Order] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Payment:
        log = logger.bind(provider_payment_id=provider_payment_id)

        payment = self._payment_repo.get_for_update_by_provider_id(provider_payment_id)
        if payment is None:
            order_id, owner = self._resolve_owner(order, metadata or {})
            try:
                payment = self._payment_repo.create(
                    {
                        "provider_payment_id": provider_payment_id,
                        "order_id": order_id,
                        **owner,
                        **values,
                    }
                )
            except IntegrityError:
                # Inserted concurrently; fall through to the update path.
                payment = self._payment_repo.get_for_update_by_provider_id(
                    provider_payment_id
                )
            else:
                log.info("payment.recorded", status=payment.status)
                return payment

        old_status = payment.status
        new_status = values.get("status", old_status)
        if STATUS_RANK[new_status] < STATUS_RANK[old_status] or (
            payment.is_terminal and new_status != old_status
        ):
            log.info(
                "payment.stale_status_ignored",
                current_status=old_status,
                received_status=new_status,
            )
            return payment

        for field, value in values.items():
            setattr(payment, field, value)
        payment.paid = payment.paid or new_status == PaymentStatus.SUCCEEDED
        self._payment_repo.save(payment)

        if new_status != old_status:
            self._on_status_changed(payment, old_status)
        else:
            log.info("payment.duplicate_notification", status=new_status)
        return payment

    def _resolve_owner(
        self, order: Optional[Order], metadata: Dict[str, Any]
    ) -> tuple[Optional[UUID], Dict[str, Any]]:
        if order is None and metadata.get("order_id"):
            order = self._order_repo.get_by_id(str(metadata["order_id"]))
        if order is not None:
            return order.id, {"user_id": order.user_id, "guest_id": order.guest_id}

        if metadata.get("user_id"):
            return None, {"user_id": int(metadata["user_id"]), "guest_id": None}
        if metadata.get("guest_id"):
            return None, {"user_id": None, "guest_id": str(metadata["guest_id"])}
        raise PaymentOwnerUnresolved()

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _on_status_changed(self, payment: Payment, old_status: str) -> None:
        """Hook: the order itself is left untouched."""
        logger.info(
            "payment.status_changed",
            provider_payment_id=payment.provider_payment_id,
            order_id=str(payment.order_id) if payment.order_id else None,
            old_status=old_status,
            new_status=payment.status,
        )
        self._record("payment.status_changed", None, payment, old_status=old_status)

    def _record(
        self, action: str, actor: Optional[Actor], payment: Payment, **data
    ) -> None:
        if self._activity:
            self._activity.record(
                action,
                actor,
                provider_payment_id=payment.provider_payment_id,
                order_id=payment.order_id,
                status=payment.status,
                **data,
            )
