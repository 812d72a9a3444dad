"""Integration tests for the Celery wiring."""

import pytest

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    """Celery loads its configuration from Django settings."""

    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "grape_shop"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "grape_shop"

    def test_celery_runs_eagerly_in_tests(self, settings):
        assert settings.CELERY_TASK_ALWAYS_EAGER is True
        assert settings.CELERY_BROKER_URL == "memory://"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_guest_cleanup_is_scheduled(self, settings):
        from modules.guests.tasks import clean_expired_guest_sessions

        entry = settings.CELERY_BEAT_SCHEDULE["clean-expired-guest-sessions"]
        assert entry["task"] == clean_expired_guest_sessions.name


class TestGuestCleanupTask:
    def test_delay_runs_and_returns_removed_count(self, expired_guest_session):
        from modules.guests.tasks import clean_expired_guest_sessions

        result = clean_expired_guest_sessions.delay()

        assert result.successful()
        assert result.result == 1
