"""API views for locations, amenities, properties, sites and site availability."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore

from apps.users.permissions import IsAdminOrReadOnly, IsHostOrAdmin, is_admin
from shared.api.responses import EnvelopeMixin, success_response
from shared.exceptions import ConflictError

from .filters import PropertyFilterSet, SiteFilterSet
from .models import Amenity, Location, Property, Site, SiteAvailability
from .serializers import (
    AmenitySerializer,
    LocationSerializer,
    PropertySerializer,
    SiteAvailabilitySerializer,
    SiteSerializer,
)


class LocationViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = LocationSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):  # type: ignore
        qs = Location.objects.all()
        if is_admin(self.request.user):
            return qs
        return qs.filter(is_active=True)


class AmenityViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = AmenitySerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["category"]

    def get_queryset(self):  # type: ignore
        qs = Amenity.objects.all()
        if is_admin(self.request.user):
            return qs
        return qs.filter(is_active=True)


def visible_to(user, active_field: str = "is_active", host_field: str = "host"):  # type: ignore
    """Everyone sees active rows; hosts also see their own inactive ones."""

    if is_admin(user):
        return Q()
    condition = Q(**{active_field: True})
    if getattr(user, "is_authenticated", False):
        condition |= Q(**{host_field: user})
    return condition


class PropertyViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = PropertySerializer
    permission_classes = [IsHostOrAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = PropertyFilterSet
    search_fields = ["name", "description", "address", "location__name"]
    ordering_fields = ["created_at", "name"]
    envelope_messages = {
        "create": "Property created",
        "update": "Property updated",
        "partial_update": "Property updated",
        "destroy": "Property deleted",
    }

    def get_queryset(self):  # type: ignore
        return (
            Property.objects.select_related("host", "location")
            .prefetch_related("amenities", "sites")
            .filter(visible_to(self.request.user))
        )

    def perform_create(self, serializer):  # type: ignore
        serializer.save(host=self.request.user)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj.activate()
        return success_response(PropertySerializer(property_obj).data, message="Property activated")

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj.deactivate()
        return success_response(PropertySerializer(property_obj).data, message="Property deactivated")


class SiteViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = SiteSerializer
    permission_classes = [IsHostOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = SiteFilterSet
    ordering_fields = ["base_price", "max_guests"]
    envelope_messages = {
        "create": "Site created",
        "update": "Site updated",
        "partial_update": "Site updated",
        "destroy": "Site deleted",
    }

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Site.objects.select_related("property")
        if is_admin(user):
            return qs
        condition = Q(is_active=True, property__is_active=True)
        if user.is_authenticated:
            condition |= Q(property__host=user)
        return qs.filter(condition)


class SiteAvailabilityViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Blocked ranges of one site; the host manages manual blocks."""

    serializer_class = SiteAvailabilitySerializer
    permission_classes = [IsHostOrAdmin]
    envelope_messages = {
        "create": "Dates blocked",
        "destroy": "Block removed",
    }

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        self.site = get_object_or_404(Site.objects.select_related("property"), pk=kwargs.get("site_id"))
        if request.method not in permissions.SAFE_METHODS:
            self.check_object_permissions(request, self.site)

    def get_queryset(self):  # type: ignore
        qs = SiteAvailability.objects.filter(site=self.site)
        start = self.request.query_params.get("start")
        end = self.request.query_params.get("end")
        if start:
            qs = qs.filter(end_date__gt=start)
        if end:
            qs = qs.filter(start_date__lt=end)
        return qs

    def get_object(self):  # type: ignore
        return get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])

    def perform_create(self, serializer):  # type: ignore
        start_date = serializer.validated_data["start_date"]
        end_date = serializer.validated_data["end_date"]
        from apps.bookings.services import ensure_site_is_available

        ensure_site_is_available(self.site, start_date, end_date)
        serializer.save(site=self.site, source=SiteAvailability.Source.MANUAL)

    def perform_destroy(self, instance):  # type: ignore
        if instance.source != SiteAvailability.Source.MANUAL:
            raise ConflictError("Booking blocks are released by cancelling the booking.", code="BOOKING_BLOCK")
        instance.delete()
