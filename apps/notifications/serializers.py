"""Serializers for notifications."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import CustomUser

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "recipient",
            "sender",
            "type",
            "title",
            "message",
            "order",
            "booking",
            "tour_booking",
            "product",
            "review",
            "property",
            "is_read",
            "read_at",
            "link",
            "action_type",
            "priority",
            "role",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields


class NotificationCreateSerializer(serializers.Serializer):
    """Admin-authored notifications (announcements, promotions)."""

    recipients = serializers.PrimaryKeyRelatedField(
        queryset=CustomUser.objects.filter(is_active=True), many=True, allow_empty=False
    )
    type = serializers.ChoiceField(choices=Notification.Type.choices, default=Notification.Type.SYSTEM)
    title = serializers.CharField(max_length=100)
    message = serializers.CharField(max_length=500)
    priority = serializers.ChoiceField(
        choices=Notification.Priority.choices, default=Notification.Priority.MEDIUM
    )
    role = serializers.ChoiceField(choices=Notification.Role.choices, default=Notification.Role.ALL)
    link = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    metadata = serializers.JSONField(required=False, default=dict)
