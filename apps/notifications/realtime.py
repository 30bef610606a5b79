"""Real-time fan-out over Django Channels.

Each authenticated WebSocket joins the group ``user.<id>``. Channels only
allows ``[A-Za-z0-9._-]`` in group names, hence the dot. Pushes are fire
and forget: there is no acknowledgement and nothing is retried. A client
that was offline fetches the persisted notifications when it reconnects,
so a failed push is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from asgiref.sync import async_to_sync  # type: ignore
from channels.layers import get_channel_layer  # type: ignore
from django.db import transaction  # type: ignore

logger = logging.getLogger(__name__)

# Handler name on the consumer for "push.event" messages is push_event.
PUSH_MESSAGE_TYPE = "push.event"


def user_group(user_id: int) -> str:
    return f"user.{user_id}"


def push_to_user(user_id: int, event: str, payload: Any) -> bool:
    """Send ``{event, data}`` to every open socket of ``user_id``."""

    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.debug("No channel layer configured, skipping real-time push")
        return False
    try:
        async_to_sync(channel_layer.group_send)(
            user_group(user_id),
            {"type": PUSH_MESSAGE_TYPE, "event": event, "payload": payload},
        )
    except Exception as e:
        logger.warning(f"Real-time push of {event} to user {user_id} failed: {e}", exc_info=True)
        return False
    logger.debug(f"Pushed {event} to user {user_id}")
    return True


def push_on_commit(user_id: int, event: str, payload: Any) -> None:
    """Push once the surrounding transaction commits; never for rolled back work."""

    transaction.on_commit(lambda: push_to_user(user_id, event, payload))


def push_unread_count_on_commit(user_id: int) -> None:
    def _push() -> None:
        from .services import unread_count_for

        push_to_user(user_id, "unread_count_update", {"count": unread_count_for(user_id)})

    transaction.on_commit(_push)
