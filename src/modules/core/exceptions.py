"""Base classes for domain exceptions.

Every app declares its own exceptions in ``exceptions.py`` extending one
of these bases.  The API layer translates them into HTTP responses via
``modules.core.responses.error_response`` using ``status_code``.
"""

from __future__ import annotations


class DomainError(Exception):
    """Root of all business-rule violations raised by the service layer."""

    status_code = 400
    default_detail = "Request could not be processed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequestError(DomainError):
    status_code = 400


class ForbiddenError(DomainError):
    status_code = 403
    default_detail = "You do not have access to this resource."


class NotFoundError(DomainError):
    status_code = 404
    default_detail = "Resource not found."


class ConflictError(DomainError):
    status_code = 409
    default_detail = "Resource already exists."


class IdentityRequired(BadRequestError):
    """Neither an authenticated user nor a guest token was presented."""

    default_detail = "Authentication or guest identity required."
