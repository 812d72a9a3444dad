"""Favorite service layer.

Keeps the set of products a user or a guest has marked as favorite.
Guest favorites are moved to the user by ``GuestMigrationService``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog
from django.db import models, transaction

from modules.core.access import owner_fields, owner_filter
from modules.favorites.dtos import FavoriteOutputDTO, FavoriteStatusDTO
from modules.favorites.exceptions import FavoriteNotFound
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.core.access import Actor
    from modules.core.activity import ActivityLogService
    from modules.favorites.dtos import AddFavoriteDTO
    from modules.favorites.repositories.interfaces import IFavoriteRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class FavoriteService:
    def __init__(
        self,
        favorite_repository: IFavoriteRepository,
        product_repository: IProductRepository,
        activity_log: Optional[ActivityLogService] = None,
    ) -> None:
        self._favorite_repo = favorite_repository
        self._product_repo = product_repository
        self._activity = activity_log

    @transaction.atomic
    def add(self, actor: Actor, dto: AddFavoriteDTO) -> FavoriteOutputDTO:
        """Mark a product as favorite.

        Raises:
            ProductNotFound: the product does not exist.
            FavoriteAlreadyExists: the product is already a favorite.
        """
        if self._product_repo.get_by_id(str(dto.product_id)) is None:
            raise ProductNotFound(f"Product {dto.product_id} not found.")

        favorite = self._favorite_repo.create(owner_fields(actor), dto.product_id)
        logger.info("favorite.added", product_id=str(dto.product_id))
        if self._activity:
            self._activity.record("favorite.added", actor, product_id=dto.product_id)
        return FavoriteOutputDTO.from_entity(favorite)

    @transaction.atomic
    def remove(self, actor: Actor, product_id: UUID | str) -> None:
        """Unmark a product.

        Raises:
            FavoriteNotFound: the product is not among the actor's favorites.
        """
        if not self._favorite_repo.delete_for_product(owner_filter(actor), product_id):
            raise FavoriteNotFound()
        logger.info("favorite.removed", product_id=str(product_id))
        if self._activity:
            self._activity.record("favorite.removed", actor, product_id=product_id)

    def list_favorites(self, actor: Actor) -> models.QuerySet:
        return self._favorite_repo.queryset_for_owner(owner_filter(actor))

    def is_favorite(self, actor: Actor, product_id: UUID | str) -> FavoriteStatusDTO:
        return FavoriteStatusDTO(
            product_id=product_id,
            is_favorite=self._favorite_repo.exists(owner_filter(actor), product_id),
        )
