"""Integration tests for the cart endpoints.

Covers:
- Add (201) returns the full priced cart; repeat adds accumulate.
- Serializer validation (400) for variant and quantity.
- Update/delete: 404 for missing lines, 403 for foreign lines.
- Clear and guest → user migration.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.carts.constants import MAX_LINE_QUANTITY
from modules.carts.models import CartItem
from modules.favorites.models import Favorite
from modules.guests.models import GuestSession

pytestmark = pytest.mark.integration

URL = "/api/v1/cart/"


def item_url(item_id):
    return f"{URL}{item_id}/"


# ---------------------------------------------------------------------------
# Add / view
# ---------------------------------------------------------------------------


class TestAddToCart:
    def test_add_returns_201_with_cart(self, user_client, product):
        response = user_client.post(
            URL,
            {"product_id": str(product.id), "variant": "cutting", "quantity": 2},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["total_price"] == "300.00"
        assert data["total_items"] == 2
        line = data["items"][0]
        assert line["unit_price"] == "150.00"
        assert line["subtotal"] == "300.00"
        assert line["product"]["name"] == "Kishmish Radiant"

    def test_quantity_defaults_to_one(self, guest_client, product):
        response = guest_client.post(
            URL, {"product_id": str(product.id), "variant": "seedling"}, format="json"
        )
        assert response.status_code == 201
        assert response.json()["items"][0]["quantity"] == 1

    def test_repeat_add_accumulates(self, user_client, product):
        payload = {"product_id": str(product.id), "variant": "cutting", "quantity": 1}
        user_client.post(URL, payload, format="json")
        response = user_client.post(URL, payload, format="json")

        assert response.json()["items"][0]["quantity"] == 2
        assert CartItem.objects.count() == 1

    def test_accumulating_past_cap(self, user_client, product):
        payload = {
            "product_id": str(product.id),
            "variant": "cutting",
            "quantity": MAX_LINE_QUANTITY,
        }
        user_client.post(URL, payload, format="json")
        response = user_client.post(URL, payload, format="json")

        assert response.status_code == 400
        assert "detail" in response.json()
        assert CartItem.objects.get().quantity == MAX_LINE_QUANTITY

    @pytest.mark.parametrize(
        "override",
        [
            {"product_id": None},
            {"variant": "graft"},
            {"quantity": 0},
            {"quantity": 10_001},
        ],
    )
    def test_invalid_payload(self, user_client, product, override):
        payload = {"product_id": str(product.id), "variant": "cutting", **override}
        response = user_client.post(URL, payload, format="json")
        assert response.status_code == 400

    def test_unpriced_variant(self, user_client, cutting_only_product):
        response = user_client.post(
            URL,
            {"product_id": str(cutting_only_product.id), "variant": "seedling"},
            format="json",
        )
        assert response.status_code == 400
        assert "seedling" in response.json()["detail"]

    def test_unknown_product(self, user_client):
        response = user_client.post(
            URL, {"product_id": str(uuid4()), "variant": "cutting"}, format="json"
        )
        assert response.status_code == 404

    def test_get_cart(self, guest_client, guest_actor, fill_cart, product):
        fill_cart(guest_actor, product, quantity=3)

        response = guest_client.get(URL)

        assert response.status_code == 200
        assert response.json()["total_price"] == "450.00"


# ---------------------------------------------------------------------------
# Update / delete / clear
# ---------------------------------------------------------------------------


class TestChangeCartLines:
    def test_update_quantity(self, user_client, user_actor, fill_cart, product):
        line = fill_cart(user_actor, product)

        response = user_client.put(item_url(line.id), {"quantity": 5}, format="json")

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 5

    def test_update_missing_line(self, user_client):
        response = user_client.put(item_url(uuid4()), {"quantity": 5}, format="json")
        assert response.status_code == 404

    def test_update_foreign_line(self, guest_client, user_actor, fill_cart, product):
        line = fill_cart(user_actor, product)

        response = guest_client.put(item_url(line.id), {"quantity": 5}, format="json")

        assert response.status_code == 403
        line.refresh_from_db()
        assert line.quantity == 1

    def test_delete_line(self, user_client, user_actor, fill_cart, product):
        line = fill_cart(user_actor, product)

        response = user_client.delete(item_url(line.id))

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_delete_foreign_line(self, user_client, guest_actor, fill_cart, product):
        line = fill_cart(guest_actor, product)
        response = user_client.delete(item_url(line.id))
        assert response.status_code == 403
        assert CartItem.objects.filter(pk=line.pk).exists()

    def test_clear(self, user_client, user_actor, fill_cart, product):
        fill_cart(user_actor, product, "cutting")
        fill_cart(user_actor, product, "seedling")

        response = user_client.delete(URL)

        assert response.status_code == 200
        assert response.json()["total_items"] == 0
        assert not CartItem.objects.exists()


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


class TestMigrateCart:
    def test_migrates_guest_cart_and_favorites(
        self, user_client, user, guest_session, guest_actor, fill_cart, product
    ):
        fill_cart(guest_actor, product, quantity=2)
        Favorite.objects.create(guest_id=guest_session.guest_id, product=product)

        response = user_client.post(
            f"{URL}migrate/", {"guest_id": guest_session.guest_id}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["migration"]["cart_items_moved"] == 1
        assert data["migration"]["favorites_moved"] == 1
        assert data["cart"]["total_items"] == 2
        assert Favorite.objects.filter(user=user).count() == 1
        assert not GuestSession.objects.exists()

    def test_guest_id_from_header(self, user_client, guest_session):
        response = user_client.post(
            f"{URL}migrate/", {}, format="json", HTTP_X_GUEST_ID=guest_session.guest_id
        )
        assert response.status_code == 200

    def test_requires_authentication(self, guest_client, guest_session):
        response = guest_client.post(
            f"{URL}migrate/", {"guest_id": guest_session.guest_id}, format="json"
        )
        assert response.status_code == 401

    def test_expired_guest_session(self, user_client, expired_guest_session):
        response = user_client.post(
            f"{URL}migrate/",
            {"guest_id": expired_guest_session.guest_id},
            format="json",
        )
        assert response.status_code == 400

    def test_missing_guest_id(self, user_client):
        response = user_client.post(f"{URL}migrate/", {}, format="json")
        assert response.status_code == 400
