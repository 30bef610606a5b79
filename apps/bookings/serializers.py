"""Serializers for campsite bookings."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.properties.models import Site

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    property_name = serializers.ReadOnlyField(source="property.name")
    site_name = serializers.ReadOnlyField(source="site.name")

    class Meta:
        model = Booking
        fields = [
            "id",
            "code",
            "guest",
            "host",
            "property",
            "property_name",
            "site",
            "site_name",
            "check_in",
            "check_out",
            "nights",
            "guests",
            "pets",
            "weekday_nights",
            "weekend_nights",
            "subtotal",
            "cleaning_fee",
            "pet_fee",
            "extra_guest_fee",
            "total",
            "status",
            "payment_status",
            "contact_name",
            "contact_phone",
            "contact_email",
            "guest_message",
            "cancelled_by",
            "cancellation_reason",
            "cancelled_at",
            "refund_amount",
            "confirmed_at",
            "completed_at",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    site = serializers.PrimaryKeyRelatedField(queryset=Site.objects.select_related("property"))
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    pets = serializers.IntegerField(min_value=0, default=0)
    contact_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    contact_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    contact_email = serializers.EmailField(required=False, allow_blank=True, default="")
    guest_message = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class BookingRefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False)
