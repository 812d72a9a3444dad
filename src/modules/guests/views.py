"""Guest session API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.exceptions import DomainError
from modules.core.responses import error_response
from modules.guests.dtos import GuestSessionOutputDTO
from modules.guests.identity import guest_token
from modules.guests.repositories.django_repository import GuestSessionDjangoRepository
from modules.guests.services import GuestSessionService


class GuestSessionView(APIView):
    """POST /api/v1/guest/session/

    Issues a new guest token (201).  A client that still holds a live
    token gets it back with a renewed expiry (200) instead.
    """

    permission_classes = [AllowAny]
    throttle_scope = "guest_session"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = GuestSessionService(GuestSessionDjangoRepository())

    def post(self, request: Request) -> Response:
        current = guest_token(request)
        if current is not None:
            try:
                session = self._service.extend_session(current)
            except DomainError as exc:
                return error_response(exc)
            dto = GuestSessionOutputDTO.from_entity(session)
            return Response(dto.model_dump(mode="json"), status=status.HTTP_200_OK)

        session = self._service.create_session(
            ip_address=request.META.get("REMOTE_ADDR"),
            user_agent=request.headers.get("User-Agent", ""),
        )
        dto = GuestSessionOutputDTO.from_entity(session)
        return Response(dto.model_dump(mode="json"), status=status.HTTP_201_CREATED)
