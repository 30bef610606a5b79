"""Tour booking domain events."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class TourBookingStatusChanged(DomainEvent):
    booking_id: int
    user_id: int
    code: str
    tour_name: str
    previous_status: str
    new_status: str
