"""JWT authentication for WebSocket connections.

Browsers cannot set headers on a WebSocket handshake, so the access token
travels in the ``token`` query parameter. Anything that does not validate
leaves the scope anonymous and the consumer refuses the connection.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async  # type: ignore
from channels.middleware import BaseMiddleware  # type: ignore
from django.contrib.auth.models import AnonymousUser  # type: ignore
from rest_framework_simplejwt.authentication import JWTAuthentication  # type: ignore
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError  # type: ignore

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user_for_token(raw_token: str):  # type: ignore
    authentication = JWTAuthentication()
    try:
        validated = authentication.get_validated_token(raw_token)
        return authentication.get_user(validated)
    except (InvalidToken, TokenError, AuthenticationFailed) as e:
        logger.info(f"Rejected WebSocket token: {e}")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):  # type: ignore
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [None])[0]
        scope = dict(scope)
        scope["user"] = await get_user_for_token(token) if token else AnonymousUser()
        return await super().__call__(scope, receive, send)
