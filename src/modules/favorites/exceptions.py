"""Favorite domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError


class FavoriteAlreadyExists(ConflictError):
    default_detail = "Product is already in favorites."


class FavoriteNotFound(NotFoundError):
    default_detail = "Product is not in favorites."
