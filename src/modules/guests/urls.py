"""Guest session URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.guests.views import GuestSessionView

urlpatterns = [
    path("guest/session/", GuestSessionView.as_view(), name="guest-session"),
]
