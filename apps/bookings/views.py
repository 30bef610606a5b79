"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore

from apps.users.permissions import is_admin
from shared.api.responses import EnvelopeMixin, success_response

from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingRefundSerializer,
    BookingSerializer,
)
from . import services


class BookingViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Guests see their trips, hosts see bookings of their properties.

    ``?as=host`` or ``?as=guest`` narrows the list to one side.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "payment_status", "property", "site"]
    envelope_messages = {
        "list": "Bookings retrieved",
        "retrieve": "Booking retrieved",
    }

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Booking.objects.select_related("property", "site")
        if is_admin(user):
            return qs
        view_as = self.request.query_params.get("as")
        if view_as == "host":
            return qs.filter(host=user)
        if view_as == "guest":
            return qs.filter(guest=user)
        return qs.filter(Q(guest=user) | Q(host=user))

    def _render(self, booking: Booking, message: str, status_code: int = status.HTTP_200_OK):
        booking = Booking.objects.select_related("property", "site").get(pk=booking.pk)
        return success_response(BookingSerializer(booking).data, message=message, status=status_code)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.create_booking(request.user, **serializer.validated_data)
        return self._render(booking, "Booking requested", status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking = services.confirm_booking(self.get_object(), request.user)
        return self._render(booking, "Booking confirmed")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_booking(
            self.get_object(), request.user, reason=serializer.validated_data["reason"]
        )
        return self._render(booking, "Booking cancelled")

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        booking = services.complete_booking(self.get_object(), request.user)
        return self._render(booking, "Booking completed")

    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):  # type: ignore
        serializer = BookingRefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.refund_booking(
            self.get_object(), request.user, amount=serializer.validated_data.get("amount")
        )
        return self._render(booking, "Booking refunded")

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking = services.confirm_payment(self.get_object(), request.user)
        return self._render(booking, "Payment confirmed")
