"""WebSocket consumer for real-time notifications.

Clients connect to ``/ws/notifications/?token=<access token>``. The socket
joins the user's group and receives ``{"event": ..., "data": ...}``
frames. Clients may send ``{"event": "typing", "to": <user id>,
"is_typing": bool}`` which is relayed to the peer as ``user_typing``, and
``{"event": "ping"}`` which is answered with ``pong``.
"""

from __future__ import annotations

import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer  # type: ignore

from .realtime import PUSH_MESSAGE_TYPE, user_group

logger = logging.getLogger(__name__)

# Application close code for a missing or rejected token.
CLOSE_UNAUTHENTICATED = 4401


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    async def connect(self):  # type: ignore
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return
        self.user_id = user.id
        self.group_name = user_group(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.debug(f"User {self.user_id} connected to notifications socket")

    async def disconnect(self, code):  # type: ignore
        group_name = getattr(self, "group_name", None)
        if group_name:
            await self.channel_layer.group_discard(group_name, self.channel_name)
            logger.debug(f"User {self.user_id} disconnected ({code})")

    async def receive_json(self, content, **kwargs):  # type: ignore
        if not isinstance(content, dict):
            return
        kind = content.get("event") or content.get("type")
        if kind == "ping":
            await self.send_json({"event": "pong", "data": {}})
        elif kind == "typing":
            try:
                peer_id = int(content.get("to"))
            except (TypeError, ValueError):
                return
            await self.channel_layer.group_send(
                user_group(peer_id),
                {
                    "type": PUSH_MESSAGE_TYPE,
                    "event": "user_typing",
                    "payload": {"from": self.user_id, "is_typing": bool(content.get("is_typing", True))},
                },
            )

    async def push_event(self, message):  # type: ignore
        await self.send_json({"event": message["event"], "data": message.get("payload")})
