"""WebSocket URL routing."""

from django.urls import path  # type: ignore

from .consumers import NotificationConsumer

websocket_urlpatterns = [
    path("ws/notifications/", NotificationConsumer.as_asgi()),
]
