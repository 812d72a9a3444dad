"""Django ORM implementation of the Favorite repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import IntegrityError, models, transaction

from modules.favorites.exceptions import FavoriteAlreadyExists
from modules.favorites.models import Favorite
from modules.favorites.repositories.interfaces import IFavoriteRepository


class FavoriteDjangoRepository(IFavoriteRepository):
    def create(self, owner_fields: Dict[str, Any], product_id: UUID) -> Favorite:
        try:
            with transaction.atomic():
                return Favorite.objects.create(**owner_fields, product_id=product_id)
        except IntegrityError as exc:
            raise FavoriteAlreadyExists() from exc

    def get_by_id(self, id: str) -> Optional[Favorite]:
        try:
            return Favorite.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Favorite.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_owner(self, owner: Dict[str, Any]) -> List[Favorite]:
        return list(Favorite.objects.filter(**owner))

    def queryset_for_owner(self, owner: Dict[str, Any]) -> models.QuerySet:
        return (
            Favorite.objects.filter(**owner)
            .select_related("product")
            .prefetch_related("product__images")
            .order_by("-created_at", "-id")
        )

    def product_ids_for_owner(self, owner: Dict[str, Any]) -> Set[UUID]:
        return set(
            Favorite.objects.filter(**owner).values_list("product_id", flat=True)
        )

    def exists(self, owner: Dict[str, Any], product_id: UUID) -> bool:
        try:
            return Favorite.objects.filter(**owner, product_id=product_id).exists()
        except (ValueError, ValidationError):
            return False

    @transaction.atomic
    def save(self, entity: Favorite) -> Favorite:
        entity.save()
        return entity

    def delete(self, id: str) -> bool:
        deleted, _ = Favorite.objects.filter(id=id).delete()
        return deleted > 0

    def delete_for_product(self, owner: Dict[str, Any], product_id: UUID) -> bool:
        deleted, _ = Favorite.objects.filter(**owner, product_id=product_id).delete()
        return deleted > 0

    def delete_for_owner(self, owner: Dict[str, Any]) -> int:
        deleted, _ = Favorite.objects.filter(**owner).delete()
        return deleted
