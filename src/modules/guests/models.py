"""Guest session model.

A guest session authorizes an anonymous client presenting the opaque
``guest_id`` token (``X-Guest-Id`` header) until ``expires_at``.  Expired
sessions never authorize anything, even before the cleanup task removes
them.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.guests.constants import GUEST_ID_MAX_LENGTH


class GuestSession(BaseModel):
    guest_id = models.CharField(max_length=GUEST_ID_MAX_LENGTH, unique=True)
    expires_at = models.DateTimeField(db_index=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=512, blank=True, default="")

    class Meta:
        db_table = "guest_sessions"
        ordering = ["-created_at"]

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()

    def __str__(self) -> str:
        return f"{self.guest_id} (expires {self.expires_at:%Y-%m-%d})"
