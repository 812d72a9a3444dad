"""Favorite API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.activity import ActivityLogService
from modules.core.constants import UUID_LOOKUP_REGEX
from modules.core.exceptions import DomainError
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response
from modules.favorites.dtos import AddFavoriteDTO
from modules.favorites.repositories.django_repository import FavoriteDjangoRepository
from modules.favorites.serializers import AddFavoriteSerializer, FavoriteSerializer
from modules.favorites.services import FavoriteService
from modules.guests.identity import require_actor
from modules.products.repositories.django_repository import ProductDjangoRepository


class FavoriteViewSet(GenericViewSet):
    """Favorites of the caller (user or guest), addressed by product id."""

    permission_classes = [AllowAny]
    pagination_class = StandardResultsSetPagination
    lookup_field = "product_id"
    lookup_value_regex = UUID_LOOKUP_REGEX

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = FavoriteService(
            favorite_repository=FavoriteDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            activity_log=ActivityLogService(),
        )

    def create(self, request: Request) -> Response:
        """POST /api/v1/favorites/"""
        serializer = AddFavoriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = AddFavoriteDTO(**serializer.validated_data)

        try:
            actor = require_actor(request)
            favorite = self._service.add(actor, dto)
        except DomainError as exc:
            return error_response(exc)
        return Response(
            favorite.model_dump(mode="json"), status=status.HTTP_201_CREATED
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/favorites/ (paginated, newest first)"""
        try:
            actor = require_actor(request)
        except DomainError as exc:
            return error_response(exc)

        page = self.paginate_queryset(self._service.list_favorites(actor))
        serializer = FavoriteSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def destroy(self, request: Request, product_id: str | None = None) -> Response:
        """DELETE /api/v1/favorites/{product_id}/"""
        try:
            actor = require_actor(request)
            self._service.remove(actor, product_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="status")
    def favorite_status(
        self, request: Request, product_id: str | None = None
    ) -> Response:
        """GET /api/v1/favorites/{product_id}/status/"""
        try:
            actor = require_actor(request)
        except DomainError as exc:
            return error_response(exc)
        result = self._service.is_favorite(actor, product_id)
        return Response(result.model_dump(mode="json"))
