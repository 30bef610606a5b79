"""Review services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from shared.application.message_bus import message_bus
from shared.exceptions import ConflictError, PermissionDeniedError

from .events import ReviewCreated, ReviewReplied
from .models import Review

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


@transaction.atomic
def create_review(guest: "CustomUser", booking: Booking, *, rating: int, comment: str = "") -> Review:
    if booking.guest_id != guest.id:
        raise PermissionDeniedError("Only the guest of this booking can review it.")
    if booking.status != Booking.Status.COMPLETED:
        raise ConflictError("Only completed stays can be reviewed.", code="BOOKING_NOT_COMPLETED")
    if Review.objects.filter(booking=booking).exists():
        raise ConflictError("This booking has already been reviewed.", code="ALREADY_REVIEWED")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                booking=booking,
                guest=guest,
                host_id=booking.host_id,
                property_id=booking.property_id,
                rating=rating,
                comment=comment or "",
            )
    except IntegrityError:
        raise ConflictError("This booking has already been reviewed.", code="ALREADY_REVIEWED")

    logger.info(f"Review {review.id} ({rating}/5) created for booking {booking.code}")
    message_bus.publish(
        ReviewCreated(
            aggregate_id=review.pk,
            review_id=review.pk,
            guest_id=guest.id,
            host_id=review.host_id,
            property_id=review.property_id,
            property_name=booking.property.name,
            rating=rating,
        )
    )
    return review


@transaction.atomic
def reply_to_review(review: Review, host: "CustomUser", reply: str) -> Review:
    if review.host_id != host.id:
        raise PermissionDeniedError("Only the host can reply to this review.")
    if review.host_reply:
        raise ConflictError("This review already has a reply.", code="ALREADY_REPLIED")

    review.host_reply = reply
    review.host_reply_at = timezone.now()
    review.save(update_fields=["host_reply", "host_reply_at", "updated_at"])

    logger.info(f"Host {host.id} replied to review {review.id}")
    message_bus.publish(
        ReviewReplied(
            aggregate_id=review.pk,
            review_id=review.pk,
            guest_id=review.guest_id,
            host_id=review.host_id,
            property_id=review.property_id,
            property_name=review.property.name,
        )
    )
    return review
