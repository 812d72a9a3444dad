"""Base abstract model and shared persistence for the Grape Shop backend.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``ActivityLog``: append-only record of user-visible actions (cart changes,
  orders, cancellations).  Written best-effort by ``ActivityLogService``.

``save()`` guard ensures ``updated_at`` is included when ``update_fields``
is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

import uuid6
from django.conf import settings
from django.db import models

# Exactly one of ``user`` / ``guest_id`` is set on every owned resource.
SINGLE_OWNER = models.Q(user__isnull=False, guest_id__isnull=True) | models.Q(
    user__isnull=True, guest_id__isnull=False
)

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


class ActivityLog(BaseModel):
    """Audit record of an action performed by a user, a guest or the system.

    Unlike the owned resources, ``user`` and ``guest_id`` may both be empty:
    system actions (payment callbacks, cleanup) have no actor.
    """

    action = models.CharField(max_length=100)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )
    guest_id = models.CharField(max_length=64, null=True, blank=True)  # noqa: DJ01
    data = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "activity_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action"], name="activity_action_idx"),
            models.Index(fields=["-created_at"], name="activity_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} ({self.user_id or self.guest_id or 'system'})"
