"""Best-effort activity logging.

``ActivityLogService.record`` never raises: the audit row is written inside
its own savepoint so a failure rolls back only the log entry, never the
business transaction that triggered it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from django.db import DatabaseError, transaction

from modules.core.access import Actor, UserActor
from modules.core.models import ActivityLog

logger = structlog.get_logger(__name__)


class ActivityLogService:
    def record(self, action: str, actor: Optional[Actor] = None, **data: Any) -> None:
        user_id = actor.id if isinstance(actor, UserActor) else None
        guest_id = getattr(actor, "guest_id", None)
        try:
            with transaction.atomic():
                ActivityLog.objects.create(
                    action=action,
                    user_id=user_id,
                    guest_id=guest_id,
                    data=_normalize_for_json(data),
                )
        except DatabaseError:
            logger.exception("activity_log.write_failed", action=action)


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
