"""Payment API views.

``PaymentViewSet`` opens and reads payments for their owners.
``PaymentNotificationView`` receives provider callbacks; it always
answers 200 so the provider stops redelivering, and records failures in
the log instead.
"""

from __future__ import annotations

import structlog
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ViewSet

from modules.core.activity import ActivityLogService
from modules.core.exceptions import DomainError
from modules.core.responses import error_response
from modules.guests.identity import require_actor
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.payments.dtos import CreatePaymentDTO, PaymentCallbackDTO
from modules.payments.gateway import build_gateway
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.payments.serializers import (
    CreatePaymentSerializer,
    PaymentNotificationSerializer,
    PaymentSerializer,
)
from modules.payments.services import PaymentService

logger = structlog.get_logger(__name__)


def build_payment_service() -> PaymentService:
    return PaymentService(
        payment_repository=PaymentDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        gateway=build_gateway(),
        activity_log=ActivityLogService(),
    )


class PaymentViewSet(ViewSet):
    permission_classes = [AllowAny]
    lookup_field = "provider_payment_id"
    lookup_value_regex = r"[A-Za-z0-9_\-]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_payment_service()

    def create(self, request: Request) -> Response:
        """POST /api/v1/payments/

        Opens a payment for one of the caller's orders and returns the
        provider confirmation URL.  ``Idempotency-Key`` is forwarded to
        the provider.
        """
        serializer = CreatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreatePaymentDTO(
            order_id=serializer.validated_data["order_id"],
            idempotence_key=request.headers.get("Idempotency-Key") or None,
        )

        try:
            actor = require_actor(request)
            payment = self._service.create_payment(actor, dto)
        except DomainError as exc:
            return error_response(exc)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    def retrieve(
        self, request: Request, provider_payment_id: str | None = None
    ) -> Response:
        """GET /api/v1/payments/{provider_payment_id}/"""
        try:
            actor = require_actor(request)
            payment = self._service.get_payment(provider_payment_id, actor)
        except DomainError as exc:
            return error_response(exc)
        return Response(PaymentSerializer(payment).data)


class PaymentNotificationView(APIView):
    """POST /api/v1/payments/notifications/"""

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = []

    def post(self, request: Request) -> Response:
        serializer = PaymentNotificationSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning("payment.notification_rejected", errors=serializer.errors)
            return Response({"status": "ignored"}, status=status.HTTP_200_OK)

        dto = PaymentCallbackDTO(**serializer.to_callback_data())
        log = logger.bind(
            provider_payment_id=dto.provider_payment_id, event=dto.event
        )
        log.info("payment.notification_received", status=dto.status)

        try:
            build_payment_service().apply_callback(dto)
        except Exception:
            log.exception("payment.notification_failed")
            return Response({"status": "error_processing"}, status=status.HTTP_200_OK)
        return Response({"status": "ok"}, status=status.HTTP_200_OK)
