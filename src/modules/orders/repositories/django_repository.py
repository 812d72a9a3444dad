"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Order + OrderItems are persisted inside one ``transaction.atomic()``
block so the aggregate is never half-written.

Concurrency control on status updates uses ``select_for_update()``
to prevent race conditions.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            user_id=data.get("user_id"),
            guest_id=data.get("guest_id"),
            contact_email=data.get("contact_email", ""),
            notes=data.get("notes", ""),
            idempotency_key=data.get("idempotency_key"),
            total_price=data["total_price"],
        )
        order.save()

        items = data.get("items", [])
        for item_data in items:
            OrderItem(
                order=order,
                product_id=item_data["product_id"],
                variant=item_data["variant"],
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            ).save()

        logger.info(
            "order.persisted", order_id=str(order.id), item_count=len(items)
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        ``prefetch_related`` loads items, items→product and status
        history in batched queries (no N+1).  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.prefetch_related("items__product", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        No joins: the lock must not extend to the nullable side of an
        outer join.  Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """List orders (newest first) with optional ORM look-ups.

        Examples of valid filters::

            {"user_id": 7}
            {"guest_id": "guest_..."}
        """
        queryset = Order.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related("items__product", "status_history")
            .filter(idempotency_key=key)
            .first()
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        deleted, _ = Order.objects.filter(id=id).delete()
        return deleted > 0

    # ------------------------------------------------------------------
    # Order-specific
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        user_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            user_id=user_id,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def guest_orders_by_email(self, email: str) -> List[Order]:
        return list(
            Order.objects.select_for_update()
            .filter(guest_id__isnull=False, contact_email__iexact=email)
            .order_by("created_at")
        )

    def assign_to_user(self, order_ids: Iterable[UUID], user_id: int) -> int:
        return Order.objects.filter(id__in=list(order_ids)).update(
            user_id=user_id, guest_id=None, updated_at=timezone.now()
        )
