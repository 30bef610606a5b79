"""API views for notifications."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore

from apps.users.permissions import is_admin
from shared.api.responses import success_response
from shared.exceptions import PermissionDeniedError

from .serializers import NotificationCreateSerializer, NotificationSerializer
from . import services


class NotificationViewSet(viewsets.GenericViewSet):
    """Inbox of the authenticated user."""

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        params = self.request.query_params
        unread_only = (params.get("unread_only") or params.get("unread")) in ("1", "true", "True")
        return services.list_notifications(self.request.user, unread_only=unread_only)

    def list(self, request):  # type: ignore
        page = self.paginate_queryset(self.get_queryset())
        data = NotificationSerializer(page, many=True).data
        response = self.get_paginated_response(data)
        response.data["message"] = "Notifications retrieved"
        response.data["unread_count"] = services.unread_count(request.user)
        return response

    def create(self, request):  # type: ignore
        if not is_admin(request.user):
            raise PermissionDeniedError("Only admins can send notifications.")
        serializer = NotificationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = dict(serializer.validated_data)
        recipients = payload.pop("recipients")
        with transaction.atomic():
            created = services.notify_users(
                [user.id for user in recipients], sender_id=request.user.id, **payload
            )
        return success_response(
            NotificationSerializer(created, many=True).data,
            message="Notifications sent",
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, pk=None):  # type: ignore
        services.delete_notification(request.user, int(pk))
        return success_response(message="Notification deleted")

    def destroy_all(self, request):  # type: ignore
        deleted = services.delete_all_notifications(request.user)
        return success_response({"deleted": deleted}, message="All notifications deleted")

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):  # type: ignore
        return success_response({"count": services.unread_count(request.user)}, message="Unread count")

    @action(detail=True, methods=["patch"], url_path="read")
    def mark_read(self, request, pk=None):  # type: ignore
        notification = services.mark_as_read(request.user, int(pk))
        return success_response(NotificationSerializer(notification).data, message="Notification marked as read")

    @action(detail=False, methods=["patch"], url_path="read-all")
    def mark_all_read(self, request):  # type: ignore
        updated = services.mark_all_as_read(request.user)
        return success_response({"updated": updated}, message="All notifications marked as read")
