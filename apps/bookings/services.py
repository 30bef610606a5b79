"""Domain services for campsite booking workflows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.properties.models import Site, SiteAvailability
from apps.users.permissions import is_admin
from shared.application.message_bus import message_bus
from shared.domain.transitions import TransitionTable
from shared.domain.value_objects import DateRange
from shared.exceptions import ConflictError, DomainError, PermissionDeniedError

from .events import BookingPaymentReceived, BookingRequested, BookingStatusChanged
from .models import Booking

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

S = Booking.Status

BOOKING_TRANSITIONS = TransitionTable(
    "booking",
    {
        S.PENDING: {S.CONFIRMED, S.CANCELLED},
        S.CONFIRMED: {S.CANCELLED, S.COMPLETED, S.REFUNDED},
        S.CANCELLED: {S.REFUNDED},
    },
)

BLOCKING_STATUSES = (S.PENDING, S.CONFIRMED)


# ============================================================================
# AVAILABILITY
# ============================================================================

def _lock_queryset_if_possible(queryset):  # type: ignore
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def ensure_site_is_available(
    site: Site,
    start_date: date,
    end_date: date,
    *,
    exclude_booking_id: int | None = None,
) -> None:
    """Raise :class:`ConflictError` if the site is booked or blocked in the period."""

    overlapping = Q(check_in__lt=end_date) & Q(check_out__gt=start_date)
    bookings_qs = Booking.objects.filter(site=site, status__in=BLOCKING_STATUSES).filter(overlapping)
    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(pk=exclude_booking_id)

    if _lock_queryset_if_possible(bookings_qs).exists():
        raise ConflictError("The site is already booked for these dates.", code="DATES_UNAVAILABLE")

    blocks_qs = SiteAvailability.objects.filter(
        site=site,
        source=SiteAvailability.Source.MANUAL,
    ).filter(Q(start_date__lt=end_date) & Q(end_date__gt=start_date))

    if _lock_queryset_if_possible(blocks_qs).exists():
        raise ConflictError("The host has blocked these dates.", code="DATES_UNAVAILABLE")


def reserve_dates_for_booking(booking: Booking) -> SiteAvailability:
    return SiteAvailability.objects.create(
        site=booking.site,
        start_date=booking.check_in,
        end_date=booking.check_out,
        source=SiteAvailability.Source.BOOKING,
        booking=booking,
        reason=f"Booking {booking.code}",
    )


def release_dates_for_booking(booking: Booking) -> int:
    deleted, _ = SiteAvailability.objects.filter(
        booking=booking,
        source=SiteAvailability.Source.BOOKING,
    ).delete()
    return deleted


# ============================================================================
# PRICING
# ============================================================================

@dataclass(frozen=True)
class StayQuote:
    nights: int
    weekday_nights: int
    weekend_nights: int
    subtotal: Decimal
    cleaning_fee: Decimal
    pet_fee: Decimal
    extra_guest_fee: Decimal

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.cleaning_fee + self.pet_fee + self.extra_guest_fee


def quote_stay(site: Site, stay: DateRange, guests: int, pets: int) -> StayQuote:
    """Friday and Saturday nights use the weekend rate; extra guests pay once per stay."""

    nights = len(stay)
    weekend = stay.weekend_nights()
    weekday = nights - weekend
    subtotal = site.nightly_rate(False) * weekday + site.nightly_rate(True) * weekend
    extra_guests = max(0, guests - site.included_guests)
    return StayQuote(
        nights=nights,
        weekday_nights=weekday,
        weekend_nights=weekend,
        subtotal=subtotal,
        cleaning_fee=site.cleaning_fee,
        pet_fee=site.pet_fee * pets,
        extra_guest_fee=site.additional_guest_fee * extra_guests,
    )


# ============================================================================
# LIFECYCLE
# ============================================================================

def _status_event(booking: Booking, previous: str, actor_id: int | None, reason: str = "") -> BookingStatusChanged:
    return BookingStatusChanged(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
        code=booking.code,
        guest_id=booking.guest_id,
        host_id=booking.host_id,
        property_id=booking.property_id,
        property_name=booking.property.name,
        previous_status=previous,
        new_status=booking.status,
        actor_id=actor_id,
        reason=reason,
    )


def _move(booking: Booking, new_status: str, *, actor_id: int | None, reason: str = "", fields=()) -> Booking:  # type: ignore
    BOOKING_TRANSITIONS.validate(booking.status, new_status)
    previous = booking.status
    booking.status = new_status
    booking.save(update_fields=["status", "updated_at", *fields])
    logger.info(f"Booking {booking.code} status changed {previous} -> {new_status}")
    message_bus.publish(_status_event(booking, previous, actor_id, reason))
    return booking


def _locked(booking: Booking) -> Booking:
    return (
        Booking.objects.select_for_update()
        .select_related("property", "site")
        .get(pk=booking.pk)
    )


def _ensure_host_or_admin(booking: Booking, user: "CustomUser") -> None:
    if booking.host_id != user.id and not is_admin(user):
        raise PermissionDeniedError("Only the host can manage this booking.")


@transaction.atomic
def create_booking(
    guest: "CustomUser",
    *,
    site: Site,
    check_in: date,
    check_out: date,
    guests: int = 1,
    pets: int = 0,
    contact_name: str = "",
    contact_phone: str = "",
    contact_email: str = "",
    guest_message: str = "",
) -> Booking:
    site = Site.objects.select_related("property").get(pk=site.pk)
    property_obj = site.property
    if not (site.is_active and property_obj.is_active):
        raise ConflictError("This site is not open for booking.", code="SITE_INACTIVE")
    if property_obj.host_id == guest.id:
        raise DomainError("You cannot book your own property.", code="OWN_PROPERTY")
    if check_in < timezone.localdate():
        raise DomainError("Check-in cannot be in the past.", code="INVALID_DATES")
    try:
        stay = DateRange(check_in, check_out)
    except ValueError:
        raise DomainError("Check-out must be after check-in.", code="INVALID_DATES")

    if guests > site.max_guests:
        raise DomainError(f"This site accepts at most {site.max_guests} guests.", code="TOO_MANY_GUESTS")
    if pets > site.max_pets:
        raise DomainError(f"This site accepts at most {site.max_pets} pets.", code="TOO_MANY_PETS")
    if len(stay) < site.minimum_nights:
        raise DomainError(f"Minimum stay is {site.minimum_nights} nights.", code="STAY_TOO_SHORT")
    if site.maximum_nights and len(stay) > site.maximum_nights:
        raise DomainError(f"Maximum stay is {site.maximum_nights} nights.", code="STAY_TOO_LONG")

    ensure_site_is_available(site, check_in, check_out)

    quote = quote_stay(site, stay, guests, pets)
    booking = Booking(
        guest=guest,
        host_id=property_obj.host_id,
        property=property_obj,
        site=site,
        check_in=check_in,
        check_out=check_out,
        nights=quote.nights,
        guests=guests,
        pets=pets,
        weekday_nights=quote.weekday_nights,
        weekend_nights=quote.weekend_nights,
        subtotal=quote.subtotal,
        cleaning_fee=quote.cleaning_fee,
        pet_fee=quote.pet_fee,
        extra_guest_fee=quote.extra_guest_fee,
        total=quote.total,
        contact_name=contact_name or guest.display_name,
        contact_phone=contact_phone or (guest.phone or ""),
        contact_email=contact_email or guest.email,
        guest_message=guest_message,
    )
    booking.save()
    reserve_dates_for_booking(booking)

    logger.info(
        f"Booking {booking.code} requested by guest {guest.id} for site {site.id} "
        f"({check_in} - {check_out}), total {booking.total}"
    )
    message_bus.publish(
        BookingRequested(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            code=booking.code,
            guest_id=guest.id,
            host_id=booking.host_id,
            property_id=property_obj.pk,
            property_name=property_obj.name,
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
        )
    )

    if site.instant_book:
        booking.confirmed_at = timezone.now()
        _move(booking, S.CONFIRMED, actor_id=None, fields=["confirmed_at"])
    return booking


@transaction.atomic
def confirm_booking(booking: Booking, user: "CustomUser") -> Booking:
    booking = _locked(booking)
    _ensure_host_or_admin(booking, user)
    booking.confirmed_at = timezone.now()
    return _move(booking, S.CONFIRMED, actor_id=user.id, fields=["confirmed_at"])


@transaction.atomic
def cancel_booking(booking: Booking, user: "CustomUser | None", *, reason: str = "") -> Booking:
    """Cancel on behalf of the guest, the host, an admin or the system (``user=None``)."""

    booking = _locked(booking)
    if user is not None and not booking.is_participant(user) and not is_admin(user):
        raise PermissionDeniedError("You cannot cancel this booking.")
    if booking.status not in BLOCKING_STATUSES:
        raise ConflictError("Only pending or confirmed bookings can be cancelled.", code="NOT_CANCELLABLE")

    return _cancel(booking, user, reason)


@transaction.atomic
def expire_booking(booking_id: int, cutoff: datetime) -> bool:
    """Cancel a booking the host left unanswered since before ``cutoff``.

    The pending and age conditions are checked again on the locked row, so a
    booking confirmed after it was listed as stale is left alone.
    """

    booking = (
        Booking.objects.select_for_update()
        .select_related("property", "site")
        .filter(pk=booking_id, status=S.PENDING, created_at__lt=cutoff)
        .first()
    )
    if booking is None:
        return False
    _cancel(booking, None, "The host did not respond in time")
    return True


def _cancel(booking: Booking, user: "CustomUser | None", reason: str) -> Booking:
    booking.cancelled_by = user
    booking.cancellation_reason = reason or ""
    booking.cancelled_at = timezone.now()
    _move(
        booking,
        S.CANCELLED,
        actor_id=user.id if user is not None else None,
        reason=reason or "",
        fields=["cancelled_by", "cancellation_reason", "cancelled_at"],
    )
    release_dates_for_booking(booking)
    return booking


@transaction.atomic
def complete_booking(booking: Booking, user: "CustomUser | None" = None) -> Booking:
    booking = _locked(booking)
    if user is not None:
        _ensure_host_or_admin(booking, user)
    if booking.check_out > timezone.localdate():
        raise ConflictError("A booking can only be completed after check-out.", code="STAY_NOT_OVER")
    booking.completed_at = timezone.now()
    return _move(
        booking,
        S.COMPLETED,
        actor_id=user.id if user is not None else None,
        fields=["completed_at"],
    )


@transaction.atomic
def refund_booking(booking: Booking, user: "CustomUser", *, amount: Decimal | None = None) -> Booking:
    booking = _locked(booking)
    _ensure_host_or_admin(booking, user)
    if booking.payment_status != Booking.PaymentStatus.PAID:
        raise ConflictError("Only paid bookings can be refunded.", code="NOT_PAID")
    amount = booking.total if amount is None else Decimal(amount)
    if amount < 0 or amount > booking.total:
        raise DomainError("Refund must be between 0 and the booking total.", code="INVALID_REFUND")

    booking.refund_amount = amount
    booking.payment_status = Booking.PaymentStatus.REFUNDED
    if booking.status == S.CONFIRMED:
        release_dates_for_booking(booking)
    return _move(
        booking,
        S.REFUNDED,
        actor_id=user.id,
        fields=["refund_amount", "payment_status"],
    )


@transaction.atomic
def confirm_payment(booking: Booking, user: "CustomUser") -> Booking:
    booking = _locked(booking)
    if not booking.is_participant(user) and not is_admin(user):
        raise PermissionDeniedError("You cannot pay for this booking.")
    if booking.payment_status == Booking.PaymentStatus.PAID:
        raise ConflictError("Payment already confirmed.", code="ALREADY_PAID")
    if booking.status not in BLOCKING_STATUSES:
        raise ConflictError("This booking can no longer be paid.", code="NOT_PAYABLE")

    booking.payment_status = Booking.PaymentStatus.PAID
    booking.paid_at = timezone.now()
    booking.save(update_fields=["payment_status", "paid_at", "updated_at"])
    logger.info(f"Booking {booking.code} paid ({booking.total})")
    message_bus.publish(
        BookingPaymentReceived(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            code=booking.code,
            guest_id=booking.guest_id,
            host_id=booking.host_id,
            property_id=booking.property_id,
            amount=str(booking.total),
        )
    )
    return booking
