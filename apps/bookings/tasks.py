"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking
from .services import complete_booking, expire_booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_pending_bookings")
def expire_pending_bookings() -> dict[str, int]:
    """
    Cancel bookings the host never answered.

    Pending bookings older than ``BOOKING_PENDING_TIMEOUT`` are cancelled by
    the system and their dates released.

    Returns:
        dict: {"expired": number of cancelled bookings, "failed": errors}
    """
    cutoff = timezone.now() - settings.BOOKING_PENDING_TIMEOUT
    expired_count = 0
    failed_count = 0

    stale = Booking.objects.filter(status=Booking.Status.PENDING, created_at__lt=cutoff)

    for booking_id in stale.values_list("pk", flat=True):
        try:
            if expire_booking(booking_id, cutoff):
                expired_count += 1
                logger.info(f"Booking {booking_id} expired automatically")
        except Exception as e:
            failed_count += 1
            logger.error(f"Error expiring booking {booking_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count, "failed": failed_count}


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete confirmed bookings once the guest has checked out.

    Returns:
        dict: {"completed": number of completed bookings, "failed": errors}
    """
    today = timezone.localdate()
    completed_count = 0
    failed_count = 0

    finished = Booking.objects.filter(status=Booking.Status.CONFIRMED, check_out__lte=today)

    for booking in finished:
        try:
            complete_booking(booking)
            completed_count += 1
            logger.info(f"Booking {booking.code} completed")
        except Exception as e:
            failed_count += 1
            logger.error(f"Error completing booking {booking.id}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count, "failed": failed_count}
