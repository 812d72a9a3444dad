"""Favorite repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Set
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.favorites.models import Favorite


class IFavoriteRepository(IRepository["Favorite"]):
    @abstractmethod
    def create(self, owner_fields: Dict[str, Any], product_id: UUID) -> Favorite:
        """Insert a favorite.

        Raises:
            FavoriteAlreadyExists: the owner already favorited the product.
        """

    @abstractmethod
    def list_for_owner(self, owner: Dict[str, Any]) -> List[Favorite]:
        """All favorites of one owner."""

    @abstractmethod
    def queryset_for_owner(self, owner: Dict[str, Any]) -> models.QuerySet:
        """Favorites of one owner, newest first, with products and images."""

    @abstractmethod
    def product_ids_for_owner(self, owner: Dict[str, Any]) -> Set[UUID]:
        """Ids of the products one owner has favorited."""

    @abstractmethod
    def exists(self, owner: Dict[str, Any], product_id: UUID) -> bool:
        """Whether the owner has favorited the product."""

    @abstractmethod
    def delete_for_product(self, owner: Dict[str, Any], product_id: UUID) -> bool:
        """Remove one favorite; ``False`` when it did not exist."""

    @abstractmethod
    def delete_for_owner(self, owner: Dict[str, Any]) -> int:
        """Delete every favorite of one owner; returns the count."""
