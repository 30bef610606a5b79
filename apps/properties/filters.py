"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Count, Q  # type: ignore

from .models import Property, Site


class PropertyFilterSet(django_filters.FilterSet):
    location = django_filters.NumberFilter(field_name="location_id")
    host = django_filters.NumberFilter(field_name="host_id")
    accommodation_type = django_filters.CharFilter(field_name="sites__accommodation_type", distinct=True)
    price_min = django_filters.NumberFilter(field_name="sites__base_price", lookup_expr="gte", distinct=True)
    price_max = django_filters.NumberFilter(field_name="sites__base_price", lookup_expr="lte", distinct=True)
    guests = django_filters.NumberFilter(field_name="sites__max_guests", lookup_expr="gte", distinct=True)

    # CSV of amenity ids, requires all selected amenities
    amenities = django_filters.CharFilter(method="filter_amenities")

    class Meta:
        model = Property
        fields = ["location", "host"]

    def filter_amenities(self, queryset, name, value):  # type: ignore
        try:
            ids = [int(x) for x in str(value).replace(" ", "").split(",") if x]
        except ValueError:
            return queryset
        if not ids:
            return queryset
        return (
            queryset.filter(amenities__id__in=ids)
            .annotate(matched_amenities=Count("amenities", filter=Q(amenities__id__in=ids), distinct=True))
            .filter(matched_amenities=len(ids))
            .distinct()
        )


class SiteFilterSet(django_filters.FilterSet):
    property = django_filters.NumberFilter(field_name="property_id")
    accommodation_type = django_filters.CharFilter(field_name="accommodation_type")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    pets = django_filters.NumberFilter(field_name="max_pets", lookup_expr="gte")

    class Meta:
        model = Site
        fields = ["property", "accommodation_type", "instant_book"]
