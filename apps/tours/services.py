"""Tour booking services.

Cancelling a tour booking leaves ``available_seats`` untouched; seats are
not returned to the pool.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.transitions import TransitionTable
from shared.exceptions import ConflictError, PermissionDeniedError

from .events import TourBookingStatusChanged
from .models import Tour, TourBooking, TourCustomer

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

S = TourBooking.Status

TOUR_BOOKING_TRANSITIONS = TransitionTable(
    "tour booking",
    {S.PENDING: {S.COMPLETED, S.CANCELLED}},
)


def _replace_customers(booking: TourBooking, customers: Iterable[Mapping[str, Any]]) -> None:
    booking.customers.all().delete()
    for data in customers:
        # save() derives the totals, so bulk_create is not used here
        TourCustomer.objects.create(
            booking=booking,
            full_name=data["full_name"],
            phone=data.get("phone", ""),
            age=data.get("age"),
            type=data.get("type", TourCustomer.PersonType.ADULT),
            email=data.get("email", ""),
            notes=data.get("notes", ""),
            members=list(data.get("members", [])),
        )


@transaction.atomic
def create_tour_booking(
    user: "CustomUser",
    *,
    tour: Tour,
    date_from,
    date_to,
    total_seats: int,
    available_seats: int | None = None,
    note: str = "",
    customers: Iterable[Mapping[str, Any]] = (),
) -> TourBooking:
    if not tour.is_active:
        raise ConflictError("This tour is not open for booking.", code="TOUR_INACTIVE")
    booking = TourBooking(
        user=user,
        tour=tour,
        date_from=date_from,
        date_to=date_to,
        total_seats=total_seats,
        available_seats=available_seats if available_seats is not None else total_seats,
        note=note or "",
    )
    booking.full_clean(exclude=["code", "user"])
    booking.save()
    _replace_customers(booking, customers)
    logger.info(f"Tour booking {booking.code} created for tour {tour.id} by user {user.id}")
    return booking


@transaction.atomic
def update_customers(booking: TourBooking, customers: Iterable[Mapping[str, Any]]) -> TourBooking:
    if booking.status != S.PENDING:
        raise ConflictError("Only pending bookings can be edited.", code="BOOKING_LOCKED")
    _replace_customers(booking, customers)
    booking.save(update_fields=["updated_at"])
    return booking


@transaction.atomic
def update_tour_booking_status(booking: TourBooking, new_status: str) -> TourBooking:
    booking = TourBooking.objects.select_for_update().select_related("tour").get(pk=booking.pk)
    TOUR_BOOKING_TRANSITIONS.validate(booking.status, new_status)
    previous = booking.status
    booking.status = new_status
    booking.save(update_fields=["status", "updated_at"])
    if new_status == S.COMPLETED:
        Tour.objects.filter(pk=booking.tour_id).update(sold_count=F("sold_count") + 1)

    logger.info(f"Tour booking {booking.code} status changed {previous} -> {new_status}")
    message_bus.publish(
        TourBookingStatusChanged(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            user_id=booking.user_id,
            code=booking.code,
            tour_name=booking.tour.name,
            previous_status=previous,
            new_status=new_status,
        )
    )
    return booking


def cancel_tour_booking(booking: TourBooking, user: "CustomUser", *, is_admin: bool = False) -> TourBooking:
    if not is_admin and booking.user_id != user.id:
        raise PermissionDeniedError("You can only cancel your own bookings.")
    return update_tour_booking_status(booking, S.CANCELLED)
