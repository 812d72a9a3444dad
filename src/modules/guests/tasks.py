"""Periodic guest session maintenance."""

from celery import shared_task

from modules.guests.repositories.django_repository import GuestSessionDjangoRepository
from modules.guests.services import GuestSessionService


@shared_task(name="modules.guests.tasks.clean_expired_guest_sessions")
def clean_expired_guest_sessions() -> int:
    """Remove expired guest sessions (scheduled daily by Celery beat)."""
    return GuestSessionService(GuestSessionDjangoRepository()).clean_expired()
