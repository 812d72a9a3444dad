"""Django ORM implementation of the Payment repository."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from modules.payments.constants import TERMINAL_PAYMENT_STATUSES
from modules.payments.models import Payment
from modules.payments.repositories.interfaces import IPaymentRepository


class PaymentDjangoRepository(IPaymentRepository):
    def create(self, data: Dict[str, Any]) -> Payment:
        # Savepoint: a duplicate provider id must not break the caller's
        # transaction.
        with transaction.atomic():
            return Payment.objects.create(**data)

    def get_by_id(self, id: str) -> Optional[Payment]:
        try:
            return Payment.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_provider_id(self, provider_payment_id: str) -> Optional[Payment]:
        return Payment.objects.filter(provider_payment_id=provider_payment_id).first()

    def get_for_update_by_provider_id(
        self, provider_payment_id: str
    ) -> Optional[Payment]:
        return (
            Payment.objects.select_for_update()
            .filter(provider_payment_id=provider_payment_id)
            .first()
        )

    def open_for_order(self, order_id: UUID) -> Optional[Payment]:
        return (
            Payment.objects.filter(order_id=order_id)
            .exclude(status__in=TERMINAL_PAYMENT_STATUSES)
            .order_by("-created_at")
            .first()
        )

    def count_for_order(self, order_id: UUID) -> int:
        return Payment.objects.filter(order_id=order_id).count()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Payment.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Payment) -> Payment:
        entity.save()
        return entity

    def delete(self, id: str) -> bool:
        deleted, _ = Payment.objects.filter(id=id).delete()
        return deleted > 0

    def assign_orders_to_user(self, order_ids: Iterable[UUID], user_id: int) -> int:
        return Payment.objects.filter(order_id__in=list(order_ids)).update(
            user_id=user_id, guest_id=None, updated_at=timezone.now()
        )
