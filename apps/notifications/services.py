"""Notification services.

Creating a notification persists it first and then schedules the real-time
pushes (``new_notification`` and a fresh ``unread_count_update``) for after
the surrounding transaction commits. High priority notifications are also
mailed to the recipient by a Celery task.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from django.db import transaction  # type: ignore
from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from shared.exceptions import NotFoundError

from .models import Notification
from .realtime import push_on_commit, push_unread_count_on_commit

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


# ============================================================================
# CREATION
# ============================================================================

def create_notification(
    *,
    recipient_id: int,
    type: str,
    title: str,
    message: str,
    sender_id: int | None = None,
    priority: str = Notification.Priority.MEDIUM,
    action_type: str = Notification.ActionType.NONE,
    role: str = Notification.Role.GUEST,
    link: str = "",
    metadata: dict[str, Any] | None = None,
    **references: Any,
) -> Notification:
    """Persist a notification and schedule its real-time delivery.

    ``references`` accepts the optional ``order``, ``booking``,
    ``tour_booking``, ``product``, ``review`` and ``property`` links,
    either as instances or as ``<name>_id`` keys.
    """

    notification = Notification.objects.create(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        title=title[:100],
        message=message[:500],
        priority=priority,
        action_type=action_type,
        role=role,
        link=link,
        metadata=metadata or {},
        **references,
    )
    logger.info(f"Notification {notification.id} ({type}) created for user {recipient_id}")

    from .serializers import NotificationSerializer

    push_on_commit(recipient_id, "new_notification", NotificationSerializer(notification).data)
    push_unread_count_on_commit(recipient_id)

    if priority == Notification.Priority.HIGH:
        from .tasks import send_notification_email

        transaction.on_commit(lambda: send_notification_email.delay(notification.id))
    return notification


def notify_users(recipient_ids: Iterable[int], **kwargs: Any) -> list[Notification]:
    """Create the same notification for several recipients."""

    return [create_notification(recipient_id=recipient_id, **kwargs) for recipient_id in recipient_ids]


# ============================================================================
# QUERIES
# ============================================================================

def list_notifications(user: "CustomUser", *, unread_only: bool = False) -> QuerySet:
    qs = Notification.objects.filter(recipient=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    return qs


def unread_count_for(user_id: int) -> int:
    return Notification.objects.filter(recipient_id=user_id, is_read=False).count()


def unread_count(user: "CustomUser") -> int:
    return unread_count_for(user.id)


def _get_owned(user: "CustomUser", notification_id: int) -> Notification:
    try:
        return Notification.objects.get(pk=notification_id, recipient=user)
    except Notification.DoesNotExist:
        raise NotFoundError("Notification not found.")


# ============================================================================
# STATE CHANGES
# ============================================================================

@transaction.atomic
def mark_as_read(user: "CustomUser", notification_id: int) -> Notification:
    notification = _get_owned(user, notification_id)
    if notification.mark_read():
        push_on_commit(user.id, "notification_read", {"id": notification.id})
        push_unread_count_on_commit(user.id)
    return notification


@transaction.atomic
def mark_all_as_read(user: "CustomUser") -> int:
    """Mark every unread notification as read; calling it again changes nothing."""

    updated = Notification.objects.filter(recipient=user, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )
    if updated:
        logger.info(f"Marked {updated} notifications as read for user {user.id}")
        push_on_commit(user.id, "notification_read", {"all": True})
        push_unread_count_on_commit(user.id)
    return updated


@transaction.atomic
def delete_notification(user: "CustomUser", notification_id: int) -> None:
    notification = _get_owned(user, notification_id)
    was_unread = not notification.is_read
    notification.delete()
    if was_unread:
        push_unread_count_on_commit(user.id)


@transaction.atomic
def delete_all_notifications(user: "CustomUser") -> int:
    deleted, _ = Notification.objects.filter(recipient=user).delete()
    if deleted:
        push_unread_count_on_commit(user.id)
    return deleted
