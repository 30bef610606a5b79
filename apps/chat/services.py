"""Direct message services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore

from shared.application.message_bus import message_bus
from shared.exceptions import DomainError, NotFoundError

from .events import DirectMessageSent
from .models import DirectMessage

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


def conversation(user: "CustomUser", other_id: int):
    """Messages exchanged by ``user`` and ``other_id``, oldest first."""

    return DirectMessage.objects.between(user.id, other_id).select_related("sender", "recipient")


@transaction.atomic
def send_message(sender: "CustomUser", *, recipient_id: int, body: str) -> DirectMessage:
    if recipient_id == sender.id:
        raise DomainError("You cannot send a message to yourself.", code="INVALID_RECIPIENT")
    recipient = get_user_model().objects.filter(pk=recipient_id, is_active=True).first()
    if recipient is None:
        raise NotFoundError("Recipient not found.")

    message = DirectMessage.objects.create(sender=sender, recipient=recipient, body=body)
    logger.info(f"User {sender.id} sent message {message.id} to {recipient.id}")
    message_bus.publish(
        DirectMessageSent(
            aggregate_id=message.pk,
            message_id=message.pk,
            sender_id=sender.id,
            recipient_id=recipient.id,
            sender_name=sender.display_name,
            preview=body[:PREVIEW_LENGTH],
        )
    )
    return message


def mark_message_read(user: "CustomUser", message_id: int) -> DirectMessage:
    """Only the recipient can mark a message read; others get a 404."""

    message = DirectMessage.objects.filter(pk=message_id, recipient=user).first()
    if message is None:
        raise NotFoundError("Message not found.")
    message.mark_read()
    return message
