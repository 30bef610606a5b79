"""Serializers for tours and tour bookings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Tour, TourBooking, TourCustomer


class TourSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tour
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "duration_days",
            "duration_nights",
            "departure_point",
            "price",
            "is_active",
            "sold_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "sold_count", "created_at", "updated_at"]


class TourMemberSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    type = serializers.ChoiceField(choices=TourCustomer.PersonType.choices, default=TourCustomer.PersonType.ADULT)


class TourCustomerSerializer(serializers.ModelSerializer):
    members = TourMemberSerializer(many=True, required=False)

    class Meta:
        model = TourCustomer
        fields = [
            "id",
            "full_name",
            "phone",
            "age",
            "type",
            "email",
            "notes",
            "members",
            "total_adults",
            "total_children",
            "total_babies",
            "total_people",
        ]
        read_only_fields = ["id", "total_adults", "total_children", "total_babies", "total_people"]


class TourBookingSerializer(serializers.ModelSerializer):
    tour_name = serializers.ReadOnlyField(source="tour.name")
    customers = TourCustomerSerializer(many=True, read_only=True)

    class Meta:
        model = TourBooking
        fields = [
            "id",
            "code",
            "user",
            "tour",
            "tour_name",
            "date_from",
            "date_to",
            "total_seats",
            "available_seats",
            "note",
            "status",
            "payment_status",
            "customers",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TourBookingCreateSerializer(serializers.Serializer):
    tour = serializers.PrimaryKeyRelatedField(queryset=Tour.objects.all())
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    total_seats = serializers.IntegerField(min_value=1)
    available_seats = serializers.IntegerField(min_value=0, required=False)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    customers = TourCustomerSerializer(many=True, required=False, default=list)

    def validate(self, attrs):  # type: ignore
        if attrs["date_to"] < attrs["date_from"]:
            raise serializers.ValidationError({"date_to": "End date must not be before the start date."})
        available = attrs.get("available_seats")
        if available is not None and available > attrs["total_seats"]:
            raise serializers.ValidationError({"available_seats": "Cannot exceed total seats."})
        return attrs


class TourCustomersUpdateSerializer(serializers.Serializer):
    customers = TourCustomerSerializer(many=True)


class TourBookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TourBooking.Status.choices)
