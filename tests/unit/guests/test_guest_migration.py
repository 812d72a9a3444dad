"""Unit tests for moving a guest's cart and favorites to a user.

Covers:
- Lines the user does not have are moved.
- Lines colliding on (product, variant) are merged by summing quantities.
- Duplicate favorites are dropped; the rest are moved.
- Nothing is left under the guest id; the session is removed.
- Expired/unknown sessions are rejected without touching data.
- A failure partway through (including a merge over the quantity cap)
  leaves the guest and user data as they were.
"""

from __future__ import annotations

from unittest import mock

import pytest
from django.db import DatabaseError

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.carts.exceptions import CartQuantityExceeded
from modules.carts.models import CartItem
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.favorites.models import Favorite
from modules.favorites.repositories.django_repository import FavoriteDjangoRepository
from modules.guests.exceptions import GuestSessionInvalid
from modules.guests.models import GuestSession
from modules.guests.repositories.django_repository import GuestSessionDjangoRepository
from modules.guests.services import GuestMigrationService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return GuestMigrationService(
        session_repository=GuestSessionDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        favorite_repository=FavoriteDjangoRepository(),
    )


class TestCartMigration:
    def test_moves_lines(self, service, guest_session, user_actor, product):
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=2,
        )

        result = service.migrate(guest_session.guest_id, user_actor)

        line = CartItem.objects.get()
        assert line.user_id == user_actor.id
        assert line.guest_id is None
        assert line.quantity == 2
        assert result.cart_items_moved == 1
        assert result.cart_items_merged == 0

    def test_merges_colliding_lines(
        self, service, guest_session, user_actor, product
    ):
        CartItem.objects.create(
            user_id=user_actor.id, product=product, variant="cutting", quantity=3
        )
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=2,
        )
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="seedling",
            quantity=1,
        )

        result = service.migrate(guest_session.guest_id, user_actor)

        lines = {
            line.variant: line.quantity
            for line in CartItem.objects.filter(user_id=user_actor.id)
        }
        assert lines == {"cutting": 5, "seedling": 1}
        assert result.cart_items_merged == 1
        assert result.cart_items_moved == 1

    def test_nothing_left_under_guest(
        self, service, guest_session, user_actor, product
    ):
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=1,
        )
        Favorite.objects.create(guest_id=guest_session.guest_id, product=product)

        service.migrate(guest_session.guest_id, user_actor)

        assert not CartItem.objects.filter(guest_id=guest_session.guest_id).exists()
        assert not Favorite.objects.filter(guest_id=guest_session.guest_id).exists()
        assert not GuestSession.objects.filter(pk=guest_session.pk).exists()


class TestFavoriteMigration:
    def test_moves_and_drops_duplicates(
        self, service, guest_session, user_actor, product, cutting_only_product
    ):
        Favorite.objects.create(user_id=user_actor.id, product=product)
        Favorite.objects.create(guest_id=guest_session.guest_id, product=product)
        Favorite.objects.create(
            guest_id=guest_session.guest_id, product=cutting_only_product
        )

        result = service.migrate(guest_session.guest_id, user_actor)

        assert result.favorites_moved == 1
        assert result.favorites_dropped == 1
        assert set(
            Favorite.objects.filter(user_id=user_actor.id).values_list(
                "product_id", flat=True
            )
        ) == {product.id, cutting_only_product.id}


class TestRejectedMigration:
    def test_expired_session(self, service, expired_guest_session, user_actor, product):
        CartItem.objects.create(
            guest_id=expired_guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=1,
        )

        with pytest.raises(GuestSessionInvalid):
            service.migrate(expired_guest_session.guest_id, user_actor)

        assert CartItem.objects.filter(
            guest_id=expired_guest_session.guest_id
        ).exists()

    def test_merge_over_cap_leaves_both_carts(
        self, service, guest_session, user_actor, product
    ):
        CartItem.objects.create(
            user_id=user_actor.id,
            product=product,
            variant="cutting",
            quantity=MAX_LINE_QUANTITY,
        )
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=1,
        )

        with pytest.raises(CartQuantityExceeded):
            service.migrate(guest_session.guest_id, user_actor)

        assert CartItem.objects.get(user_id=user_actor.id).quantity == MAX_LINE_QUANTITY
        assert CartItem.objects.filter(guest_id=guest_session.guest_id).exists()
        assert GuestSession.objects.filter(guest_id=guest_session.guest_id).exists()

    def test_failure_midway_restores_everything(
        self, service, guest_session, user_actor, product, cutting_only_product
    ):
        CartItem.objects.create(
            guest_id=guest_session.guest_id,
            product=product,
            variant="cutting",
            quantity=2,
        )
        Favorite.objects.create(
            guest_id=guest_session.guest_id, product=cutting_only_product
        )

        with mock.patch.object(
            FavoriteDjangoRepository,
            "delete_for_owner",
            side_effect=DatabaseError("connection lost"),
        ):
            with pytest.raises(DatabaseError):
                service.migrate(guest_session.guest_id, user_actor)

        line = CartItem.objects.get()
        assert line.guest_id == guest_session.guest_id
        assert line.user_id is None
        assert Favorite.objects.get().guest_id == guest_session.guest_id
        assert GuestSession.objects.filter(guest_id=guest_session.guest_id).exists()

    def test_unknown_session(self, service, user_actor):
        with pytest.raises(GuestSessionInvalid):
            service.migrate("guest_" + "f" * 32, user_actor)

    def test_second_migration_fails(self, service, guest_session, user_actor):
        service.migrate(guest_session.guest_id, user_actor)
        with pytest.raises(GuestSessionInvalid):
            service.migrate(guest_session.guest_id, user_actor)
