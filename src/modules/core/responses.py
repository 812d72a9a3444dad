"""Translation of domain exceptions into DRF responses."""

from __future__ import annotations

from rest_framework.response import Response

from modules.core.exceptions import DomainError


def error_response(exc: DomainError) -> Response:
    """Build the ``{"detail": ...}`` body used for every domain error."""
    return Response({"detail": exc.detail}, status=exc.status_code)
