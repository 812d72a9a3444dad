"""Favorite DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.favorites.models import Favorite


class AddFavoriteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID


class FavoriteOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    created_at: datetime

    @classmethod
    def from_entity(cls, favorite: Favorite) -> FavoriteOutputDTO:
        return cls(
            id=favorite.id,
            product_id=favorite.product_id,
            created_at=favorite.created_at,
        )


class FavoriteStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    is_favorite: bool
