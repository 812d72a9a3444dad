"""Guest session repository interface."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.guests.models import GuestSession


class IGuestSessionRepository(IRepository["GuestSession"]):
    @abstractmethod
    def create(
        self,
        guest_id: str,
        expires_at: datetime,
        ip_address: Optional[str] = None,
        user_agent: str = "",
    ) -> GuestSession:
        """Insert a new session."""

    @abstractmethod
    def get_by_guest_id(self, guest_id: str) -> Optional[GuestSession]:
        """Retrieve a session by its token, expired or not."""

    @abstractmethod
    def get_for_update(self, guest_id: str) -> Optional[GuestSession]:
        """Retrieve a session by its token with a row-level lock."""

    @abstractmethod
    def extend(self, guest_id: str, expires_at: datetime, now: datetime) -> bool:
        """Move ``expires_at`` forward if the session is still live.

        Returns ``False`` when the session is missing or already expired.
        """

    @abstractmethod
    def delete_by_guest_id(self, guest_id: str) -> bool:
        """Remove a session by its token."""

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        """Remove every session expired at *now*; returns the count."""
