"""Django ORM implementation of the Product repository.

Methods return ``None`` (or omit missing keys) instead of raising: the
service layer decides how to translate a missing product.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.prefetch_related("images").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        unique_ids = set(ids)
        if not unique_ids:
            return {}
        return Product.objects.prefetch_related("images").in_bulk(unique_ids)

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Product.objects.prefetch_related("images")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        deleted, _ = Product.objects.filter(id=id).delete()
        return deleted > 0
