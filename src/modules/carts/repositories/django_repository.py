"""Django ORM implementation of the Cart repository.

``add_quantity`` is race-safe: an existing line is incremented under a
row lock; a missing one is inserted inside a savepoint and, if a
concurrent request inserted it first (unique constraint violation), the
insert falls back to an atomic ``F()`` increment.  The summed quantity
never exceeds ``MAX_LINE_QUANTITY``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, models, transaction
from django.db.models import F
from django.utils import timezone

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.carts.exceptions import CartQuantityExceeded
from modules.carts.models import CartItem
from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete Cart repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[CartItem]:
        try:
            return CartItem.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[CartItem]:
        try:
            return CartItem.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = CartItem.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_owner(
        self, owner: Dict[str, Any], for_update: bool = False
    ) -> List[CartItem]:
        queryset = CartItem.objects.filter(**owner).order_by("created_at", "id")
        if for_update:
            queryset = queryset.select_for_update()
        return list(queryset)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_quantity(
        self,
        owner_fields: Dict[str, Any],
        product_id: UUID,
        variant: str,
        quantity: int,
    ) -> CartItem:
        lookup = {
            key: value for key, value in owner_fields.items() if value is not None
        }
        lookup.update(product_id=product_id, variant=variant)

        existing = CartItem.objects.select_for_update().filter(**lookup).first()
        if existing is not None:
            return self._increment(existing, quantity)

        try:
            with transaction.atomic():
                return CartItem.objects.create(
                    **owner_fields,
                    product_id=product_id,
                    variant=variant,
                    quantity=quantity,
                )
        except IntegrityError:
            logger.info("cart.concurrent_insert", product_id=str(product_id))
            existing = CartItem.objects.select_for_update().get(**lookup)
            return self._increment(existing, quantity)

    def _increment(self, locked: CartItem, quantity: int) -> CartItem:
        if locked.quantity + quantity > MAX_LINE_QUANTITY:
            raise CartQuantityExceeded()
        CartItem.objects.filter(id=locked.id).update(
            quantity=F("quantity") + quantity, updated_at=timezone.now()
        )
        return CartItem.objects.get(id=locked.id)

    @transaction.atomic
    def save(self, entity: CartItem) -> CartItem:
        entity.save()
        return entity

    def delete(self, id: str) -> bool:
        deleted, _ = CartItem.objects.filter(id=id).delete()
        return deleted > 0

    def delete_ids(self, ids: Iterable[UUID]) -> int:
        deleted, _ = CartItem.objects.filter(id__in=list(ids)).delete()
        return deleted

    def delete_for_owner(self, owner: Dict[str, Any]) -> int:
        deleted, _ = CartItem.objects.filter(**owner).delete()
        return deleted
