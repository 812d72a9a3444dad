from __future__ import annotations

from uuid import uuid4

import pytest

from modules.favorites.dtos import AddFavoriteDTO
from modules.favorites.exceptions import FavoriteAlreadyExists, FavoriteNotFound
from modules.favorites.models import Favorite
from modules.favorites.repositories.django_repository import FavoriteDjangoRepository
from modules.favorites.services import FavoriteService
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return FavoriteService(
        favorite_repository=FavoriteDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


class TestAddFavorite:
    def test_adds(self, service, user_actor, product):
        result = service.add(user_actor, AddFavoriteDTO(product_id=product.id))

        assert result.product_id == product.id
        assert Favorite.objects.filter(user_id=user_actor.id).count() == 1

    def test_duplicate_conflicts(self, service, user_actor, product):
        service.add(user_actor, AddFavoriteDTO(product_id=product.id))
        with pytest.raises(FavoriteAlreadyExists) as exc_info:
            service.add(user_actor, AddFavoriteDTO(product_id=product.id))
        assert exc_info.value.status_code == 409

    def test_same_product_for_user_and_guest(
        self, service, user_actor, guest_actor, product
    ):
        service.add(user_actor, AddFavoriteDTO(product_id=product.id))
        service.add(guest_actor, AddFavoriteDTO(product_id=product.id))
        assert Favorite.objects.count() == 2

    def test_unknown_product(self, service, user_actor):
        with pytest.raises(ProductNotFound):
            service.add(user_actor, AddFavoriteDTO(product_id=uuid4()))


class TestRemoveFavorite:
    def test_removes(self, service, guest_actor, product):
        service.add(guest_actor, AddFavoriteDTO(product_id=product.id))
        service.remove(guest_actor, product.id)
        assert not Favorite.objects.exists()

    def test_not_a_favorite(self, service, guest_actor, product):
        with pytest.raises(FavoriteNotFound):
            service.remove(guest_actor, product.id)


class TestQueries:
    def test_status(self, service, user_actor, product, cutting_only_product):
        service.add(user_actor, AddFavoriteDTO(product_id=product.id))

        assert service.is_favorite(user_actor, product.id).is_favorite is True
        assert (
            service.is_favorite(user_actor, cutting_only_product.id).is_favorite
            is False
        )

    def test_list_newest_first(
        self, service, user_actor, product, cutting_only_product
    ):
        service.add(user_actor, AddFavoriteDTO(product_id=product.id))
        service.add(user_actor, AddFavoriteDTO(product_id=cutting_only_product.id))

        ids = [fav.product_id for fav in service.list_favorites(user_actor)]
        assert ids == [cutting_only_product.id, product.id]
