"""Cart repository interface.

Owners are passed as ORM look-up dicts built by
``modules.core.access.owner_filter`` / ``owner_fields``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.carts.models import CartItem


class ICartRepository(IRepository["CartItem"]):
    """Repository contract for cart lines."""

    @abstractmethod
    def list_for_owner(
        self, owner: Dict[str, Any], for_update: bool = False
    ) -> List[CartItem]:
        """All lines of one owner, oldest first (optionally row-locked)."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[CartItem]:
        """Retrieve a line with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def add_quantity(
        self,
        owner_fields: Dict[str, Any],
        product_id: UUID,
        variant: str,
        quantity: int,
    ) -> CartItem:
        """Create the (owner, product, variant) line or add to its quantity.

        Raises:
            CartQuantityExceeded: the summed quantity is over the cap.
        """

    @abstractmethod
    def delete_ids(self, ids: Iterable[UUID]) -> int:
        """Delete exactly the given lines; returns the count."""

    @abstractmethod
    def delete_for_owner(self, owner: Dict[str, Any]) -> int:
        """Delete every line of one owner; returns the count."""
