"""Serializers for user references embedded in other resources."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserShortSerializer(serializers.ModelSerializer):
    """Public view of a user in bookings, reviews and messages."""

    display_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ["id", "email", "display_name", "avatar_url", "role"]
        read_only_fields = fields
