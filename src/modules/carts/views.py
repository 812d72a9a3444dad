"""Cart API views.

Exposes ``CartService`` over HTTP.  Carts are open to authenticated users
and to guests presenting a live guest token; the actor is resolved per
request by ``modules.guests.identity``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.carts.dtos import AddCartItemDTO, UpdateCartItemDTO
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import (
    AddCartItemSerializer,
    MigrateCartSerializer,
    UpdateCartItemSerializer,
)
from modules.carts.services import CartService
from modules.core.activity import ActivityLogService
from modules.core.constants import UUID_LOOKUP_REGEX
from modules.core.exceptions import DomainError
from modules.core.responses import error_response
from modules.favorites.repositories.django_repository import FavoriteDjangoRepository
from modules.guests.exceptions import GuestSessionInvalid
from modules.guests.identity import guest_token, require_actor, user_actor
from modules.guests.repositories.django_repository import GuestSessionDjangoRepository
from modules.guests.services import GuestMigrationService
from modules.products.repositories.django_repository import ProductDjangoRepository


class CartViewSet(ViewSet):
    """ViewSet for the caller's cart.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    permission_classes = [AllowAny]
    lookup_value_regex = UUID_LOOKUP_REGEX

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        activity = ActivityLogService()
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            activity_log=activity,
        )
        self._migration = GuestMigrationService(
            session_repository=GuestSessionDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            favorite_repository=FavoriteDjangoRepository(),
            activity_log=activity,
        )

    def get_permissions(self):
        if self.action == "migrate":
            return [IsAuthenticated()]
        return super().get_permissions()

    def list(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        try:
            actor = require_actor(request)
            cart = self._service.get_cart(actor)
        except DomainError as exc:
            return error_response(exc)
        return Response(cart.model_dump(mode="json"))

    def create(self, request: Request) -> Response:
        """POST /api/v1/cart/"""
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = AddCartItemDTO(**serializer.validated_data)

        try:
            actor = require_actor(request)
            cart = self._service.add_item(actor, dto)
        except DomainError as exc:
            return error_response(exc)
        return Response(cart.model_dump(mode="json"), status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/cart/{pk}/"""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateCartItemDTO(**serializer.validated_data)

        try:
            actor = require_actor(request)
            cart = self._service.update_quantity(actor, pk, dto)
        except DomainError as exc:
            return error_response(exc)
        return Response(cart.model_dump(mode="json"))

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/cart/{pk}/"""
        try:
            actor = require_actor(request)
            cart = self._service.remove_item(actor, pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(cart.model_dump(mode="json"))

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        try:
            actor = require_actor(request)
            cart = self._service.clear(actor)
        except DomainError as exc:
            return error_response(exc)
        return Response(cart.model_dump(mode="json"))

    @action(detail=False, methods=["post"])
    def migrate(self, request: Request) -> Response:
        """POST /api/v1/cart/migrate/

        Moves the guest's cart and favorites to the authenticated user.
        The guest token comes from the body or the guest header.
        """
        serializer = MigrateCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        guest_id = serializer.validated_data.get("guest_id") or guest_token(request)
        if not guest_id:
            return error_response(GuestSessionInvalid("Guest id is required."))

        user = user_actor(request.user)
        try:
            result = self._migration.migrate(guest_id, user)
            cart = self._service.get_cart(user)
        except DomainError as exc:
            return error_response(exc)
        return Response(
            {
                "migration": result.model_dump(),
                "cart": cart.model_dump(mode="json"),
            }
        )
