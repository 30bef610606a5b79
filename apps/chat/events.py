"""Chat domain events."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class DirectMessageSent(DomainEvent):
    message_id: int
    sender_id: int
    recipient_id: int
    sender_name: str
    preview: str
