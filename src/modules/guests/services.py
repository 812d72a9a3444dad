"""Guest identity services.

``GuestSessionService`` issues and validates the opaque guest tokens that
let anonymous clients own a cart, favorites and orders.
``GuestMigrationService`` moves a guest's cart and favorites to a user
once the guest signs in.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.carts.exceptions import CartQuantityExceeded
from modules.core.access import GuestActor, UserActor, owner_filter
from modules.guests.constants import GUEST_ID_PREFIX, GUEST_ID_TOKEN_BYTES
from modules.guests.dtos import MigrationResultDTO
from modules.guests.exceptions import GuestSessionInvalid

if TYPE_CHECKING:
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.core.activity import ActivityLogService
    from modules.favorites.repositories.interfaces import IFavoriteRepository
    from modules.guests.models import GuestSession
    from modules.guests.repositories.interfaces import IGuestSessionRepository

logger = structlog.get_logger(__name__)


class GuestSessionService:
    """Receives an ``IGuestSessionRepository`` via constructor injection."""

    def __init__(
        self,
        repository: IGuestSessionRepository,
        ttl_days: Optional[int] = None,
    ) -> None:
        self._repo = repository
        if ttl_days is None:
            ttl_days = settings.GUEST_SESSION_TTL_DAYS
        self._ttl = timedelta(days=ttl_days)

    @staticmethod
    def generate_guest_id() -> str:
        """Return a fresh opaque token: ``guest_`` followed by 32 hex chars."""
        return GUEST_ID_PREFIX + secrets.token_hex(GUEST_ID_TOKEN_BYTES)

    def create_session(
        self, ip_address: Optional[str] = None, user_agent: str = ""
    ) -> GuestSession:
        session = self._repo.create(
            guest_id=self.generate_guest_id(),
            expires_at=timezone.now() + self._ttl,
            ip_address=ip_address,
            user_agent=user_agent[:512],
        )
        logger.info("guest.session_created", session_id=str(session.id))
        return session

    def extend_session(self, guest_id: str) -> GuestSession:
        """Reset the expiry window of a live session to a full TTL.

        Raises:
            GuestSessionInvalid: the session is unknown or already expired.
        """
        now = timezone.now()
        if not self._repo.extend(guest_id, now + self._ttl, now):
            raise GuestSessionInvalid()
        session = self._repo.get_by_guest_id(guest_id)
        if session is None:
            raise GuestSessionInvalid()
        return session

    def is_valid(self, guest_id: Optional[str]) -> bool:
        if not guest_id:
            return False
        session = self._repo.get_by_guest_id(guest_id)
        return session is not None and not session.is_expired

    def end_session(self, guest_id: str) -> None:
        self._repo.delete_by_guest_id(guest_id)

    def clean_expired(self) -> int:
        """Delete every expired session; returns how many were removed."""
        removed = self._repo.delete_expired(timezone.now())
        logger.info("guest.sessions_cleaned", removed=removed)
        return removed


class GuestMigrationService:
    """Moves a guest's cart lines and favorites to a registered user.

    Cart lines colliding on (product, variant) are merged by summing
    quantities; favorites the user already has win and the guest's
    duplicates are dropped.  Everything left under the guest id (and the
    guest session itself) is deleted in the same transaction.
    """

    def __init__(
        self,
        session_repository: IGuestSessionRepository,
        cart_repository: ICartRepository,
        favorite_repository: IFavoriteRepository,
        activity_log: Optional[ActivityLogService] = None,
    ) -> None:
        self._session_repo = session_repository
        self._cart_repo = cart_repository
        self._favorite_repo = favorite_repository
        self._activity = activity_log

    @transaction.atomic
    def migrate(self, guest_id: str, user: UserActor) -> MigrationResultDTO:
        """Merge the guest's data into *user*'s.

        The guest session row is locked first so concurrent migrations of
        the same guest serialize; the second one fails once the session is
        gone.

        Raises:
            GuestSessionInvalid: the guest session is unknown or expired.
            CartQuantityExceeded: a merged line would go over the cap.
        """
        log = logger.bind(user_id=user.id)

        session = self._session_repo.get_for_update(guest_id)
        if session is None or session.is_expired:
            log.warning("guest.migration_rejected")
            raise GuestSessionInvalid()

        guest = GuestActor(guest_id=guest_id)
        merged, moved = self._migrate_cart(guest, user)
        favorites_moved, favorites_dropped = self._migrate_favorites(guest, user)

        self._cart_repo.delete_for_owner(owner_filter(guest))
        self._favorite_repo.delete_for_owner(owner_filter(guest))
        self._session_repo.delete_by_guest_id(guest_id)

        result = MigrationResultDTO(
            cart_items_merged=merged,
            cart_items_moved=moved,
            favorites_moved=favorites_moved,
            favorites_dropped=favorites_dropped,
        )
        log.info("guest.migrated", **result.model_dump())
        if self._activity:
            self._activity.record("guest.migrated", user, **result.model_dump())
        return result

    def _migrate_cart(self, guest: GuestActor, user: UserActor) -> tuple[int, int]:
        guest_lines = self._cart_repo.list_for_owner(
            owner_filter(guest), for_update=True
        )
        user_lines = {
            (line.product_id, line.variant): line
            for line in self._cart_repo.list_for_owner(
                owner_filter(user), for_update=True
            )
        }

        merged = moved = 0
        for line in guest_lines:
            existing = user_lines.get((line.product_id, line.variant))
            if existing is not None:
                if existing.quantity + line.quantity > MAX_LINE_QUANTITY:
                    raise CartQuantityExceeded()
                existing.quantity += line.quantity
                self._cart_repo.save(existing)
                self._cart_repo.delete(str(line.id))
                merged += 1
            else:
                line.user_id = user.id
                line.guest_id = None
                self._cart_repo.save(line)
                moved += 1
        return merged, moved

    def _migrate_favorites(
        self, guest: GuestActor, user: UserActor
    ) -> tuple[int, int]:
        user_products = self._favorite_repo.product_ids_for_owner(owner_filter(user))

        moved = dropped = 0
        for favorite in self._favorite_repo.list_for_owner(owner_filter(guest)):
            if favorite.product_id in user_products:
                dropped += 1
                continue
            favorite.user_id = user.id
            favorite.guest_id = None
            self._favorite_repo.save(favorite)
            moved += 1
        return moved, dropped
