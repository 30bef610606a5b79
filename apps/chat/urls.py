"""URL routing for direct messages."""

from django.urls import path  # type: ignore

from .views import DirectMessageViewSet

urlpatterns = [
    path("", DirectMessageViewSet.as_view({"get": "list", "post": "create"}), name="message-list"),
    path("<int:pk>/read/", DirectMessageViewSet.as_view({"patch": "mark_read"}), name="message-read"),
]
