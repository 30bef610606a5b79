"""
Booking Domain Events

Published by :mod:`apps.bookings.services` inside the booking transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingRequested(DomainEvent):
    """
    Event: a guest requested a stay

    Triggers:
    - Notify the host (new_booking_request)
    """
    booking_id: int
    code: str
    guest_id: int
    host_id: int
    property_id: int
    property_name: str
    check_in: str
    check_out: str


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: booking moved to a new status

    ``actor_id`` is None when the system made the change (expiry, checkout).
    """
    booking_id: int
    code: str
    guest_id: int
    host_id: int
    property_id: int
    property_name: str
    previous_status: str
    new_status: str
    actor_id: int | None = None
    reason: str = ""


@dataclass(kw_only=True)
class BookingPaymentReceived(DomainEvent):
    booking_id: int
    code: str
    guest_id: int
    host_id: int
    property_id: int
    amount: str
