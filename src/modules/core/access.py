"""Actor model and access policy.

An *actor* is whoever issues a request: a registered user (``UserActor``)
or an anonymous guest holding a valid session token (``GuestActor``).
Owned resources (cart lines, favorites, orders, payments) carry exactly
one of ``user_id`` / ``guest_id``; ``can_access`` decides whether an actor
may touch one of them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Union


class AccessMode(enum.Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class UserActor:
    id: int
    is_admin: bool = False
    email: str = ""

    @property
    def is_guest(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"user:{self.id}"


@dataclass(frozen=True)
class GuestActor:
    guest_id: str

    @property
    def is_admin(self) -> bool:
        return False

    @property
    def is_guest(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"guest:{self.guest_id}"


Actor = Union[UserActor, GuestActor]


class OwnedResource(Protocol):
    user_id: Optional[int]
    guest_id: Optional[str]


def owner_filter(actor: Actor) -> Dict[str, Any]:
    """ORM lookup kwargs selecting the rows owned by *actor*."""
    if isinstance(actor, UserActor):
        return {"user_id": actor.id}
    return {"guest_id": actor.guest_id}


def owner_fields(actor: Actor) -> Dict[str, Any]:
    """Field values that assign a new row to *actor* (and only to it)."""
    if isinstance(actor, UserActor):
        return {"user_id": actor.id, "guest_id": None}
    return {"user_id": None, "guest_id": actor.guest_id}


def is_owner(actor: Actor, resource: OwnedResource) -> bool:
    if isinstance(actor, UserActor):
        return resource.user_id is not None and resource.user_id == actor.id
    return resource.guest_id is not None and resource.guest_id == actor.guest_id


def can_access(
    actor: Optional[Actor],
    resource: OwnedResource,
    mode: AccessMode = AccessMode.READ,
) -> bool:
    """Return ``True`` when *actor* may read or mutate *resource*.

    Owners always pass.  Administrators pass for ``READ`` only; write
    overrides (e.g. admin cancellation) are granted explicitly by the
    calling service.
    """
    if actor is None:
        return False
    if is_owner(actor, resource):
        return True
    return mode is AccessMode.READ and actor.is_admin
