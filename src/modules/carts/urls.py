"""Cart URL configuration.

``DELETE /cart/`` (clear) is not a router-generated route, so the
collection endpoint is declared explicitly ahead of the router's.
"""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.carts.views import CartViewSet

router = DefaultRouter(trailing_slash=True)
router.register("cart", CartViewSet, basename="cart")

cart_collection = CartViewSet.as_view(
    {"get": "list", "post": "create", "delete": "clear"}
)

urlpatterns = [
    path("cart/", cart_collection, name="cart-collection"),
    *router.urls,
]
