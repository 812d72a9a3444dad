"""Product repository interface.

The catalogue is read-only for this service: the contract only exposes
look-ups (single, batched and listing).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product catalogue."""

    @abstractmethod
    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        """Fetch several products (with images) in one query, keyed by id."""
