"""Direct messages between users.

A conversation is simply the set of messages exchanged by two users; there
is no separate conversation row.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore


class DirectMessageQuerySet(models.QuerySet):
    def between(self, first_id: int, second_id: int) -> "DirectMessageQuerySet":
        return self.filter(
            Q(sender_id=first_id, recipient_id=second_id) | Q(sender_id=second_id, recipient_id=first_id)
        )

    def involving(self, user_id: int) -> "DirectMessageQuerySet":
        return self.filter(Q(sender_id=user_id) | Q(recipient_id=user_id))


class DirectMessage(models.Model):
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    body = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = DirectMessageQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sender", "recipient", "created_at"]),
            models.Index(fields=["recipient", "is_read"]),
        ]

    def __str__(self) -> str:
        return f"Message {self.pk} from {self.sender_id} to {self.recipient_id}"

    def mark_read(self) -> bool:
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True
