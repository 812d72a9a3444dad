"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes by
``error_response``; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.core.activity import ActivityLogService
from modules.core.constants import UUID_LOOKUP_REGEX
from modules.core.exceptions import DomainError
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response
from modules.guests.identity import require_actor, user_actor
from modules.notifications.notifiers import EmailOrderNotifier
from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    LinkGuestOrdersResultSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.  Guests reach checkout, their orders
    and cancellation through the guest header.
    """

    queryset = Order.objects.none()
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_price", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = UUID_LOOKUP_REGEX

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            notifier=EmailOrderNotifier(),
            activity_log=ActivityLogService(),
            payment_repository=PaymentDjangoRepository(),
        )

    def get_permissions(self):
        if self.action in {"partial_update", "all_orders"}:
            return [IsAdminUser()]
        if self.action == "link_guest_orders":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "all_orders"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Checks out the caller's cart.  Supports idempotency via the
        ``Idempotency-Key`` header: a replayed key returns the original
        order instead of failing on the now empty cart.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        data = create_serializer.validated_data
        dto = CreateOrderDTO(
            contact_email=data.get("contact_email"),
            notes=data.get("notes", ""),
            idempotency_key=request.headers.get("Idempotency-Key") or None,
        )

        try:
            actor = require_actor(request)
            order = self._service.create_order(actor, dto)
        except DomainError as exc:
            return error_response(exc)

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        The caller's own orders.  Filtering (status, date range, total
        range) is handled by ``OrderFilter``; ordering by
        ``OrderingFilter`` (``?ordering=created_at``).  Paginated.
        """
        try:
            actor = require_actor(request)
        except DomainError as exc:
            return error_response(exc)
        return self._paginated(request, self._service.list_orders(actor))

    @action(detail=False, methods=["get"], url_path="all")
    def all_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/all/ (administrators only)

        Accepts ``?user=``, ``?status=``, ``?ordering=`` and pagination
        (``?page=``, ``?limit=``).
        """
        try:
            queryset = self._service.list_all_orders(user_actor(request.user))
        except DomainError as exc:
            return error_response(exc)
        return self._paginated(request, queryset)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            actor = require_actor(request)
            order = self._service.get_order(pk, actor)
        except DomainError as exc:
            return error_response(exc)
        serializer = OrderSerializer(order)
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Updates order status (administrators only).  Cancellations are
        **not** allowed via this endpoint; use ``POST /orders/{id}/cancel/``.
        """
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderStatusDTO(**serializer.validated_data)

        try:
            order = self._service.update_status(pk, user_actor(request.user), dto)
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Cancel (dedicated action)
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            actor = require_actor(request)
            order = self._service.cancel_order(
                pk, actor, notes=serializer.validated_data["notes"]
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Guest order linking
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"], url_path="link-guest-orders")
    def link_guest_orders(self, request: Request) -> Response:
        """POST /api/v1/orders/link-guest-orders/

        Attaches guest orders placed with the account's email address to
        the authenticated user.
        """
        try:
            result = self._service.link_guest_orders(user_actor(request.user))
        except DomainError as exc:
            return error_response(exc)
        return Response(LinkGuestOrdersResultSerializer(result.model_dump()).data)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _paginated(self, request: Request, queryset) -> Response:
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)
