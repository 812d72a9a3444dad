"""Payment URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.payments.views import PaymentNotificationView, PaymentViewSet

router = DefaultRouter(trailing_slash=True)
router.register("payments", PaymentViewSet, basename="payment")

urlpatterns = [
    path(
        "payments/notifications/",
        PaymentNotificationView.as_view(),
        name="payment-notifications",
    ),
    *router.urls,
]
