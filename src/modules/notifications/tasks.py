"""Email delivery tasks."""

from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from modules.notifications.emails import build_status_email

logger = structlog.get_logger(__name__)


@shared_task(
    bind=True,
    name="modules.notifications.tasks.send_order_status_email",
    max_retries=3,
    default_retry_delay=60,
)
def send_order_status_email(self, email: str, order_number: str, status: str) -> int:
    """Send the status update email; retried on SMTP/network failures."""
    subject, body = build_status_email(order_number, status)
    try:
        sent = send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [email],
            fail_silently=False,
        )
    except (SMTPException, OSError) as exc:
        logger.warning(
            "notification.email_failed",
            order_number=order_number,
            attempt=self.request.retries + 1,
        )
        raise self.retry(exc=exc)
    logger.info("notification.email_sent", order_number=order_number, status=status)
    return sent
