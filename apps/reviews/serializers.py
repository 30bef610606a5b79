"""Serializers for reviews."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking
from apps.users.serializers import UserShortSerializer

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    guest = UserShortSerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "booking",
            "guest",
            "host",
            "property",
            "rating",
            "comment",
            "host_reply",
            "host_reply_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.select_related("property"))
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class ReviewReplySerializer(serializers.Serializer):
    reply = serializers.CharField()
