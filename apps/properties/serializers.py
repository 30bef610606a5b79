"""Serializers for locations, amenities, properties and sites."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.permissions import is_admin
from apps.users.serializers import UserShortSerializer

from .models import Amenity, Location, Property, Site, SiteAvailability


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ["id", "name", "is_active", "created_at"]
        read_only_fields = ["created_at"]


class AmenitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Amenity
        fields = ["id", "name", "category", "is_active"]


class SiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Site
        fields = [
            "id",
            "property",
            "name",
            "accommodation_type",
            "included_guests",
            "max_guests",
            "max_pets",
            "base_price",
            "weekend_price",
            "cleaning_fee",
            "pet_fee",
            "additional_guest_fee",
            "minimum_nights",
            "maximum_nights",
            "instant_book",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_property(self, value: Property) -> Property:
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and not is_admin(user) and value.host_id != user.id:
            raise serializers.ValidationError("You can only add sites to your own properties.")
        return value

    def validate(self, attrs):  # type: ignore
        included = attrs.get("included_guests", getattr(self.instance, "included_guests", 2))
        max_guests = attrs.get("max_guests", getattr(self.instance, "max_guests", 4))
        if included > max_guests:
            raise serializers.ValidationError({"included_guests": "Cannot exceed max guests."})
        minimum = attrs.get("minimum_nights", getattr(self.instance, "minimum_nights", 1))
        maximum = attrs.get("maximum_nights", getattr(self.instance, "maximum_nights", None))
        if maximum is not None and maximum < minimum:
            raise serializers.ValidationError({"maximum_nights": "Must not be below minimum nights."})
        return attrs


class PropertySerializer(serializers.ModelSerializer):
    host = UserShortSerializer(read_only=True)
    location_name = serializers.ReadOnlyField(source="location.name")
    amenities = serializers.PrimaryKeyRelatedField(
        queryset=Amenity.objects.filter(is_active=True), many=True, required=False
    )
    sites = SiteSerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "host",
            "name",
            "slug",
            "description",
            "location",
            "location_name",
            "address",
            "amenities",
            "is_active",
            "sites",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "is_active", "created_at", "updated_at"]


class SiteAvailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteAvailability
        fields = ["id", "site", "start_date", "end_date", "source", "booking", "reason", "created_at"]
        read_only_fields = ["site", "source", "booking", "created_at"]

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "Must be after the start date."})
        return attrs
