"""Order service layer (Use Cases).

Orchestrates checkout (cart → order), status management and
cancellation.  All write operations are atomic: the service defines
the unit-of-work boundary.

Business rules enforced:
- Checkout drains the owner's cart in the same transaction that inserts
  the order; any unpriceable line aborts the whole checkout.
- Item prices are snapshotted at checkout; the total is computed with
  ``Decimal`` arithmetic and never recomputed.
- Guests must leave a contact email.
- Status transitions validated against the state machine; shipped or
  delivered orders cannot be cancelled; cancelling twice is a no-op.
- History recorded on every status change.
- Status emails are sent after commit and never fail the operation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import models, transaction

from modules.core.access import (
    AccessMode,
    UserActor,
    can_access,
    owner_fields,
    owner_filter,
)
from modules.orders.constants import NON_CANCELLABLE_STATES, OrderStatus
from modules.orders.dtos import LinkGuestOrdersResultDTO
from modules.orders.exceptions import (
    AdminRequired,
    CartEmpty,
    ContactEmailRequired,
    IdempotencyKeyConflict,
    InvalidOrderStatus,
    OrderAccessDenied,
    OrderNotFound,
)
from modules.products.exceptions import ProductNotFound
from modules.products.services import PricingService

if TYPE_CHECKING:
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.core.access import Actor
    from modules.core.activity import ActivityLogService
    from modules.notifications.notifiers import OrderNotifier
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.repositories.interfaces import IPaymentRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        pricing_service: Optional[PricingService] = None,
        notifier: Optional[OrderNotifier] = None,
        activity_log: Optional[ActivityLogService] = None,
        payment_repository: Optional[IPaymentRepository] = None,
    ) -> None:
        self._order_repo = order_repository
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._pricing = pricing_service or PricingService(product_repository)
        self._notifier = notifier
        self._activity = activity_log
        self._payment_repo = payment_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, actor: Actor, dto: CreateOrderDTO) -> Order:
        """Turn the actor's cart into an order.

        Steps:
        1. Guests must provide a contact email (checked before the cart).
        2. Lock the actor's cart lines (SELECT FOR UPDATE).
        3. Replay a previous order carrying the same idempotency key.
        4. Price every line at the current catalogue price.
        5. Persist order + items, then delete exactly the locked lines.
        6. Record initial history; schedule the confirmation email.

        Raises:
            ContactEmailRequired: guest checkout without a contact email.
            CartEmpty: the cart has no lines.
            ProductNotFound: a cart line references a missing product.
            VariantUnavailable: a cart line's variant has no price.
            IdempotencyKeyConflict: the key belongs to another owner's order.
        """
        log = logger.bind(actor=str(actor))
        log.info("order.creation_started")

        contact_email = dto.contact_email
        if contact_email is None and isinstance(actor, UserActor):
            contact_email = actor.email or None
        if actor.is_guest and not contact_email:
            raise ContactEmailRequired()

        owner = owner_filter(actor)
        lines = self._cart_repo.list_for_owner(owner, for_update=True)

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing is not None:
                if not can_access(actor, existing, AccessMode.WRITE):
                    raise IdempotencyKeyConflict()
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return existing

        if not lines:
            log.warning("order.cart_empty")
            raise CartEmpty()

        products = self._product_repo.get_many(line.product_id for line in lines)
        repo_items = []
        total = Decimal("0.00")
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                raise ProductNotFound(f"Product {line.product_id} not found.")
            unit_price = self._pricing.require_price(product, line.variant)
            total += unit_price * line.quantity
            repo_items.append(
                {
                    "product_id": line.product_id,
                    "variant": line.variant,
                    "quantity": line.quantity,
                    "unit_price": unit_price,
                }
            )

        order = self._order_repo.create(
            {
                **owner_fields(actor),
                "contact_email": contact_email or "",
                "notes": dto.notes or "",
                "idempotency_key": dto.idempotency_key,
                "total_price": total,
                "items": repo_items,
            }
        )
        self._cart_repo.delete_ids(line.id for line in lines)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.CREATED,
            notes="Order created",
            user_id=_user_id(actor),
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_price=str(total),
            item_count=len(repo_items),
        )
        self._record(
            "order.created",
            actor,
            order_id=order.id,
            order_number=order.order_number,
            total_price=total,
        )
        self._on_status_changed(order)

        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def cancel_order(
        self, order_id: UUID | str, actor: Actor, notes: str = ""
    ) -> Order:
        """Cancel an order on behalf of its owner or an administrator.

        Acquires a row-level lock on the order **first** so concurrent
        cancellations serialize.  Cancelling an already cancelled order
        returns it unchanged.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: the actor neither owns the order nor is admin.
            InvalidOrderStatus: the order was shipped or delivered.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=str(order.id), current_status=order.status)

        if not (can_access(actor, order, AccessMode.WRITE) or actor.is_admin):
            log.warning("order.access_denied", actor=str(actor))
            raise OrderAccessDenied()

        if order.status == OrderStatus.CANCELLED:
            log.info("order.already_cancelled")
            return self._order_repo.get_by_id(str(order.id)) or order

        if order.status in NON_CANCELLABLE_STATES or not order.can_transition_to(
            OrderStatus.CANCELLED
        ):
            log.warning("order.cancel_not_allowed")
            raise InvalidOrderStatus(
                f"Cannot cancel order in status {order.status}."
            )

        old_status = order.status
        order.status = OrderStatus.CANCELLED
        self._order_repo.save(order)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.CANCELLED,
            old_status=old_status,
            notes=notes or "Order cancelled",
            user_id=_user_id(actor),
        )

        log.info("order.cancelled")
        self._record("order.cancelled", actor, order_id=order.id, old_status=old_status)
        self._on_status_changed(order)
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_status(
        self, order_id: UUID | str, actor: Actor, dto: UpdateOrderStatusDTO
    ) -> Order:
        """Move an order forward in its lifecycle (administrators only).

        Cancellation is not available here: it goes through
        ``cancel_order`` so its rules apply uniformly.

        Raises:
            AdminRequired: the actor is not an administrator.
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
        """
        if not actor.is_admin:
            raise AdminRequired()

        new_status = dto.status
        if new_status == OrderStatus.CANCELLED:
            raise InvalidOrderStatus("Use the cancel endpoint for cancellations.")

        order = self._order_repo.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {new_status}."
            )

        old_status = order.status
        order.status = new_status
        self._order_repo.save(order)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=new_status,
            old_status=old_status,
            notes=dto.notes,
            user_id=_user_id(actor),
        )

        log.info("order.status_updated")
        self._record(
            "order.status_updated",
            actor,
            order_id=order.id,
            old_status=old_status,
            new_status=new_status,
        )
        self._on_status_changed(order)
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def link_guest_orders(self, actor: Actor) -> LinkGuestOrdersResultDTO:
        """Attach guest orders placed with the user's email to the user.

        Matching is case-insensitive on the trimmed contact email and
        spans every guest id.  Payments of the linked orders follow them.

        Raises:
            ContactEmailRequired: the caller is a guest or has no email.
        """
        if not isinstance(actor, UserActor) or not actor.email.strip():
            raise ContactEmailRequired("An account email is required to link orders.")

        orders = self._order_repo.guest_orders_by_email(actor.email.strip())
        order_ids = [order.id for order in orders]
        if order_ids:
            self._order_repo.assign_to_user(order_ids, actor.id)
            if self._payment_repo is not None:
                self._payment_repo.assign_orders_to_user(order_ids, actor.id)

        logger.info("order.guest_orders_linked", user_id=actor.id, count=len(order_ids))
        if order_ids:
            self._record("order.guest_orders_linked", actor, order_ids=order_ids)
        return LinkGuestOrdersResultDTO(
            linked_orders=len(order_ids), order_ids=order_ids
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str, actor: Actor) -> Order:
        """Retrieve a single order visible to *actor*.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: the order belongs to someone else.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not can_access(actor, order, AccessMode.READ):
            raise OrderAccessDenied()
        return order

    def list_orders(self, actor: Actor) -> models.QuerySet:
        """Orders owned by *actor*, newest first."""
        return self._order_repo.list(owner_filter(actor))

    def list_all_orders(self, actor: Actor) -> models.QuerySet:
        """Every order (administrators only).

        Raises:
            AdminRequired: the actor is not an administrator.
        """
        if not actor.is_admin:
            raise AdminRequired()
        return self._order_repo.list()

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _on_status_changed(self, order: Order) -> None:
        """Hook: schedule the status email once the transaction commits."""
        if self._notifier is None or not settings.ORDER_NOTIFICATIONS_ENABLED:
            return
        if not order.contact_email:
            logger.info("order.notification_skipped", order_id=str(order.id))
            return

        order_id = str(order.id)
        email = order.contact_email
        order_number = order.order_number
        status = order.status
        transaction.on_commit(
            lambda: self._send_notification(order_id, email, order_number, status)
        )

    def _send_notification(
        self, order_id: str, email: str, order_number: str, status: str
    ) -> None:
        try:
            self._notifier.order_status_changed(email, order_number, status)
        except Exception:
            logger.exception("order.notification_failed", order_id=order_id)
        else:
            logger.info("order.notification_sent", order_id=order_id, status=status)

    def _record(self, action: str, actor: Actor, **data) -> None:
        if self._activity:
            self._activity.record(action, actor, **data)


def _user_id(actor: Actor) -> Optional[int]:
    return actor.id if isinstance(actor, UserActor) else None
