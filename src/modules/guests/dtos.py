"""Guest identity DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.guests.models import GuestSession


class GuestSessionOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    guest_id: str
    expires_at: datetime

    @classmethod
    def from_entity(cls, session: GuestSession) -> GuestSessionOutputDTO:
        return cls(guest_id=session.guest_id, expires_at=session.expires_at)


class MigrationResultDTO(BaseModel):
    """Outcome of moving a guest's cart and favorites to a user."""

    model_config = ConfigDict(frozen=True)

    cart_items_merged: int = 0
    cart_items_moved: int = 0
    favorites_moved: int = 0
    favorites_dropped: int = 0
