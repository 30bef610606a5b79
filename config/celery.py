"""Celery application for TrailHub.

Tasks are discovered from every installed app. Booking housekeeping runs
from the static beat schedule below; the unpaid-order sweep is a
:class:`~shared.infrastructure.scheduling.PeriodicJob` started from the
``on_after_configure`` hook and stopped through the same handle.
"""

import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

from shared.infrastructure.scheduling import PeriodicJob

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("trailhub")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


def build_order_sweep_job(celery_app: Celery) -> PeriodicJob:
    from django.conf import settings  # type: ignore

    return PeriodicJob(
        celery_app,
        name="sweep-expired-orders",
        task="orders.sweep_expired_orders",
        interval=settings.ORDER_SWEEP_INTERVAL,
    )


order_sweep_job: PeriodicJob | None = None


@app.on_after_configure.connect
def start_periodic_jobs(sender: Celery, **kwargs) -> None:
    global order_sweep_job
    if order_sweep_job is None:
        order_sweep_job = build_order_sweep_job(sender)
    order_sweep_job.start()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel campsite bookings nobody confirmed in time - every 15 minutes
    "expire-pending-bookings": {
        "task": "bookings.expire_pending_bookings",
        "schedule": crontab(minute="*/15"),
    },
    # Complete campsite bookings after check-out - every hour
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),
    },
}
