"""Payment repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.payments.models import Payment


class IPaymentRepository(IRepository["Payment"]):
    """Repository contract for payment mirror rows."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Payment:
        """Insert a payment row.

        Raises:
            IntegrityError: a row with the same provider id already exists.
        """

    @abstractmethod
    def get_by_provider_id(self, provider_payment_id: str) -> Optional[Payment]:
        """Retrieve a payment by the provider's id."""

    @abstractmethod
    def get_for_update_by_provider_id(
        self, provider_payment_id: str
    ) -> Optional[Payment]:
        """Retrieve a payment by provider id with a row-level lock."""

    @abstractmethod
    def open_for_order(self, order_id: UUID) -> Optional[Payment]:
        """Most recent non-terminal payment of an order, if any."""

    @abstractmethod
    def count_for_order(self, order_id: UUID) -> int:
        """Number of payments ever opened for an order."""

    @abstractmethod
    def assign_orders_to_user(self, order_ids: Iterable[UUID], user_id: int) -> int:
        """Re-own the payments of the given orders to a user; returns the count."""
