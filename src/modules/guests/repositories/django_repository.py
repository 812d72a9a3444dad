"""Django ORM implementation of the guest session repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.guests.models import GuestSession
from modules.guests.repositories.interfaces import IGuestSessionRepository

logger = structlog.get_logger(__name__)


class GuestSessionDjangoRepository(IGuestSessionRepository):
    def create(
        self,
        guest_id: str,
        expires_at: datetime,
        ip_address: Optional[str] = None,
        user_agent: str = "",
    ) -> GuestSession:
        return GuestSession.objects.create(
            guest_id=guest_id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def get_by_id(self, id: str) -> Optional[GuestSession]:
        try:
            return GuestSession.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_guest_id(self, guest_id: str) -> Optional[GuestSession]:
        return GuestSession.objects.filter(guest_id=guest_id).first()

    def get_for_update(self, guest_id: str) -> Optional[GuestSession]:
        return (
            GuestSession.objects.select_for_update().filter(guest_id=guest_id).first()
        )

    def extend(self, guest_id: str, expires_at: datetime, now: datetime) -> bool:
        updated = GuestSession.objects.filter(
            guest_id=guest_id, expires_at__gt=now
        ).update(expires_at=expires_at, updated_at=now)
        return updated > 0

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = GuestSession.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: GuestSession) -> GuestSession:
        entity.save()
        return entity

    def delete(self, id: str) -> bool:
        deleted, _ = GuestSession.objects.filter(id=id).delete()
        return deleted > 0

    def delete_by_guest_id(self, guest_id: str) -> bool:
        deleted, _ = GuestSession.objects.filter(guest_id=guest_id).delete()
        return deleted > 0

    def delete_expired(self, now: datetime) -> int:
        deleted, _ = GuestSession.objects.filter(expires_at__lte=now).delete()
        return deleted
