"""URL routing for notifications."""

from django.urls import path  # type: ignore

from .views import NotificationViewSet

notification_list = NotificationViewSet.as_view({"get": "list", "post": "create", "delete": "destroy_all"})
notification_detail = NotificationViewSet.as_view({"delete": "destroy"})
notification_read = NotificationViewSet.as_view({"patch": "mark_read"})
notification_read_all = NotificationViewSet.as_view({"patch": "mark_all_read"})
notification_unread_count = NotificationViewSet.as_view({"get": "unread_count"})

urlpatterns = [
    path("", notification_list, name="notification-list"),
    path("unread-count/", notification_unread_count, name="notification-unread-count"),
    path("read-all/", notification_read_all, name="notification-read-all"),
    path("<int:pk>/", notification_detail, name="notification-detail"),
    path("<int:pk>/read/", notification_read, name="notification-read"),
]
