"""API views for tours and tour bookings."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore

from apps.users.permissions import IsAdminOrReadOnly, IsAdminRole, is_admin
from shared.api.responses import EnvelopeMixin, success_response

from .models import Tour, TourBooking
from .serializers import (
    TourBookingCreateSerializer,
    TourBookingSerializer,
    TourBookingStatusSerializer,
    TourCustomersUpdateSerializer,
    TourSerializer,
)
from . import services


class TourViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = TourSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["is_active"]
    envelope_messages = {
        "create": "Tour created",
        "update": "Tour updated",
        "partial_update": "Tour updated",
        "destroy": "Tour deleted",
    }

    def get_queryset(self):  # type: ignore
        qs = Tour.objects.all()
        if is_admin(self.request.user):
            return qs
        return qs.filter(is_active=True)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        tour = self.get_object()
        tour.activate()
        return success_response(TourSerializer(tour).data, message="Tour activated")

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        tour = self.get_object()
        tour.deactivate()
        return success_response(TourSerializer(tour).data, message="Tour deactivated")


class TourBookingViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = TourBookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "tour"]
    envelope_messages = {
        "list": "Tour bookings retrieved",
        "retrieve": "Tour booking retrieved",
    }

    def get_queryset(self):  # type: ignore
        qs = TourBooking.objects.select_related("tour").prefetch_related("customers")
        if is_admin(self.request.user):
            return qs
        return qs.filter(user=self.request.user)

    def get_permissions(self):  # type: ignore
        if self.action == "set_status":
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def _render(self, booking: TourBooking, message: str, status_code: int = status.HTTP_200_OK):
        booking = self.get_queryset().get(pk=booking.pk)
        return success_response(TourBookingSerializer(booking).data, message=message, status=status_code)

    def create(self, request):  # type: ignore
        serializer = TourBookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.create_tour_booking(request.user, **serializer.validated_data)
        return self._render(booking, "Tour booking created", status.HTTP_201_CREATED)

    @action(detail=True, methods=["put"])
    def customers(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = TourCustomersUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update_customers(booking, serializer.validated_data["customers"])
        return self._render(booking, "Customers updated")

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = TourBookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.update_tour_booking_status(self.get_object(), serializer.validated_data["status"])
        return self._render(booking, "Tour booking status updated")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = services.cancel_tour_booking(
            self.get_object(), request.user, is_admin=is_admin(request.user)
        )
        return self._render(booking, "Tour booking cancelled")
