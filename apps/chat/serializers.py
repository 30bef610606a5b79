"""Serializers for direct messages."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import DirectMessage


class DirectMessageSerializer(serializers.ModelSerializer):
    sender = UserShortSerializer(read_only=True)
    recipient = UserShortSerializer(read_only=True)

    class Meta:
        model = DirectMessage
        fields = ["id", "sender", "recipient", "body", "is_read", "read_at", "created_at"]
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    recipient = serializers.IntegerField(min_value=1)
    body = serializers.CharField(max_length=5000)
