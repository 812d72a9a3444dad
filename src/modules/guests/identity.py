"""Actor resolution for incoming requests.

A request is made either by an authenticated user (JWT bearer token) or
by a guest presenting ``X-Guest-Id``.  The user wins when both are sent.
A guest token that does not match a live session is rejected rather than
treated as anonymous, so clients learn to request a new one.
"""

from __future__ import annotations

from typing import Optional

from django.conf import settings
from rest_framework.request import Request

from modules.core.access import Actor, GuestActor, UserActor
from modules.core.exceptions import IdentityRequired
from modules.guests.repositories.django_repository import GuestSessionDjangoRepository
from modules.guests.services import GuestSessionService


def guest_token(request: Request) -> Optional[str]:
    value = request.headers.get(settings.GUEST_ID_HEADER, "")
    return value.strip() or None


def user_actor(user) -> UserActor:
    return UserActor(id=user.pk, is_admin=user.is_staff, email=user.email or "")


def resolve_actor(
    request: Request,
    session_service: Optional[GuestSessionService] = None,
) -> Optional[Actor]:
    """Build the actor for *request*, or ``None`` if it carries no identity.

    A valid guest session is extended on every use.

    Raises:
        GuestSessionInvalid: a guest token was sent but is unknown or expired.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user_actor(user)

    guest_id = guest_token(request)
    if guest_id is None:
        return None

    service = session_service or GuestSessionService(GuestSessionDjangoRepository())
    service.extend_session(guest_id)
    return GuestActor(guest_id=guest_id)


def require_actor(
    request: Request,
    session_service: Optional[GuestSessionService] = None,
) -> Actor:
    """Like ``resolve_actor`` but a missing identity is an error.

    Raises:
        IdentityRequired: neither a user nor a guest token was presented.
        GuestSessionInvalid: the guest token is unknown or expired.
    """
    actor = resolve_actor(request, session_service)
    if actor is None:
        raise IdentityRequired()
    return actor
