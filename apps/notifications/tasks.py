"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_notification_email")
def send_notification_email(notification_id: int) -> bool:
    """Mail a copy of a high priority notification to its recipient."""

    notification = (
        Notification.objects.select_related("recipient").filter(pk=notification_id).first()
    )
    if notification is None:
        logger.warning(f"Notification {notification_id} vanished before it could be mailed")
        return False

    recipient = notification.recipient
    if not recipient.email:
        return False

    try:
        send_mail(
            subject=notification.title,
            message=notification.message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient.email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient.email}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient.email}: {notification.title}")
    return True
