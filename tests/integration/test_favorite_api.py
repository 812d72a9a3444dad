from __future__ import annotations

from uuid import uuid4

import pytest

from modules.favorites.models import Favorite

pytestmark = pytest.mark.integration

URL = "/api/v1/favorites/"


class TestFavoriteEndpoints:
    def test_add(self, user_client, product):
        response = user_client.post(URL, {"product_id": str(product.id)}, format="json")

        assert response.status_code == 201
        assert response.json()["product_id"] == str(product.id)

    def test_add_twice_conflicts(self, guest_client, product):
        payload = {"product_id": str(product.id)}
        guest_client.post(URL, payload, format="json")
        response = guest_client.post(URL, payload, format="json")
        assert response.status_code == 409

    def test_add_unknown_product(self, user_client):
        response = user_client.post(URL, {"product_id": str(uuid4())}, format="json")
        assert response.status_code == 404

    def test_list_is_paginated(self, user_client, user, product, cutting_only_product):
        Favorite.objects.create(user=user, product=product)
        Favorite.objects.create(user=user, product=cutting_only_product)

        response = user_client.get(URL)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert len(data["results"]) == 2

    def test_list_excludes_other_owners(self, guest_client, user, product):
        Favorite.objects.create(user=user, product=product)
        assert guest_client.get(URL).json()["count"] == 0

    def test_remove(self, user_client, user, product):
        Favorite.objects.create(user=user, product=product)

        response = user_client.delete(f"{URL}{product.id}/")

        assert response.status_code == 204
        assert not Favorite.objects.exists()

    def test_remove_missing(self, user_client, product):
        response = user_client.delete(f"{URL}{product.id}/")
        assert response.status_code == 404

    def test_status(self, user_client, user, product):
        Favorite.objects.create(user=user, product=product)

        response = user_client.get(f"{URL}{product.id}/status/")

        assert response.status_code == 200
        assert response.json() == {"product_id": str(product.id), "is_favorite": True}

    def test_requires_identity(self, api_client, product):
        response = api_client.post(URL, {"product_id": str(product.id)}, format="json")
        assert response.status_code == 400
