"""Guest identity exceptions."""

from __future__ import annotations

from modules.core.exceptions import BadRequestError


class GuestSessionInvalid(BadRequestError):
    """The presented guest token is unknown or its session has expired."""

    default_detail = "Guest session is invalid or expired."
