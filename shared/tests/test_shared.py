"""Tests for the shared kernel: errors, envelope, transitions, codes and scheduling."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

import pytest
from celery import Celery
from django.db import models
from rest_framework import exceptions, status

from apps.bookings.models import Booking
from apps.properties.models import Property, Site
from apps.users.models import User
from shared.api.exceptions import envelope_exception_handler, flatten_errors
from shared.api.responses import envelope, success_response
from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from shared.domain.transitions import TransitionTable
from shared.domain.value_objects import DateRange
from shared.exceptions import CodeGenerationError, ConflictError, InvalidTransitionError
from shared.infrastructure.codes import dated_code, save_with_unique_code
from shared.infrastructure.scheduling import PeriodicJob


# ============================================================================
# ENVELOPE AND ERRORS
# ============================================================================

def test_envelope_omits_missing_data():
    body = envelope(message="Done")

    assert body["success"] is True
    assert body["message"] == "Done"
    assert "data" not in body
    assert "timestamp" in body


def test_success_response_carries_extra_keys():
    response = success_response([1, 2], message="Listed", pagination={"page": 1})

    assert response.status_code == 200
    assert response.data["data"] == [1, 2]
    assert response.data["pagination"] == {"page": 1}


def test_flatten_errors_joins_nested_fields():
    detail = {
        "email": ["This field is required."],
        "address": {"city": ["Too long."]},
        "items": [{}, {"quantity": ["Must be positive."]}],
        "non_field_errors": ["Dates overlap."],
    }

    assert flatten_errors(detail) == [
        "email: This field is required.",
        "address.city: Too long.",
        "items.1.quantity: Must be positive.",
        "Dates overlap.",
    ]


def test_domain_error_uses_its_own_status_and_code():
    response = envelope_exception_handler(ConflictError("Taken", code="DATES_UNAVAILABLE"), {})

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.data["success"] is False
    assert response.data["code"] == "DATES_UNAVAILABLE"


def test_validation_error_becomes_422():
    response = envelope_exception_handler(exceptions.ValidationError({"rating": ["Too high."]}), {})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.data["code"] == "VALIDATION_ERROR"
    assert response.data["errors"] == ["rating: Too high."]


def test_drf_errors_keep_status_with_upper_case_code():
    response = envelope_exception_handler(exceptions.NotFound(), {})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.data["code"] == "NOT_FOUND"


# ============================================================================
# TRANSITIONS AND VALUE OBJECTS
# ============================================================================

def test_transition_table_rejects_unknown_moves():
    table = TransitionTable("order", {"pending": {"confirmed", "cancelled"}, "confirmed": {"shipping"}})

    table.validate("pending", "confirmed")
    assert table.is_terminal("cancelled")
    with pytest.raises(InvalidTransitionError) as info:
        table.validate("confirmed", "pending")
    assert info.value.details == {"current": "confirmed", "target": "pending"}


def test_date_range_counts_weekend_nights():
    monday = date(2026, 10, 19)
    stay = DateRange(monday, monday + timedelta(days=7))

    assert len(stay) == 7
    assert stay.weekend_nights() == 2


def test_empty_date_range_is_rejected():
    with pytest.raises(ValueError):
        DateRange(date(2026, 10, 4), date(2026, 10, 4))


# ============================================================================
# MESSAGE BUS
# ============================================================================

@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    value: int


def test_failing_handler_does_not_stop_the_others():
    bus = MessageBus()
    seen: list[int] = []

    def broken(event):
        raise RuntimeError("boom")

    def recorder(event):
        seen.append(event.value)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, recorder)
    bus.register_event_handler(SomethingHappened, recorder)
    bus.publish(SomethingHappened(value=3))

    assert seen == [3]


# ============================================================================
# CODES
# ============================================================================

def test_dated_code_format():
    code = dated_code("HDB", 5, today=date(2026, 10, 17))

    assert code.startswith("HDB171026")
    assert len(code) == len("HDB171026") + 5


@pytest.fixture
def existing_booking(db):
    host = User.objects.create_user(email="code-host@example.com", password="HostPass123", role=User.RoleChoices.HOST)
    guest = User.objects.create_user(email="code-guest@example.com", password="GuestPass123")
    camp = Property.objects.create(host=host, name="Code camp")
    site = Site.objects.create(property=camp, name="C1", base_price=Decimal("100000"))
    return Booking.objects.create(
        guest=guest,
        host=host,
        property=camp,
        site=site,
        check_in=date(2026, 11, 2),
        check_out=date(2026, 11, 4),
        nights=2,
    )


def _copy_of(booking: Booking) -> Booking:
    return Booking(
        guest_id=booking.guest_id,
        host_id=booking.host_id,
        property_id=booking.property_id,
        site_id=booking.site_id,
        check_in=booking.check_in,
        check_out=booking.check_out,
        nights=booking.nights,
    )


@pytest.mark.django_db
def test_code_collision_is_retried(existing_booking):
    candidates = iter([existing_booking.code, "HDB17102699999"])
    fresh = _copy_of(existing_booking)

    save_with_unique_code(fresh, "code", lambda: next(candidates), lambda: models.Model.save(fresh))

    assert fresh.pk is not None
    assert fresh.code == "HDB17102699999"


@pytest.mark.django_db
def test_code_generation_gives_up_after_attempts(existing_booking):
    fresh = _copy_of(existing_booking)

    with pytest.raises(CodeGenerationError):
        save_with_unique_code(
            fresh, "code", lambda: existing_booking.code, lambda: models.Model.save(fresh), attempts=3
        )

    assert fresh.pk is None
    assert fresh.code == ""


# ============================================================================
# SCHEDULING
# ============================================================================

def test_periodic_job_start_and_stop():
    app = Celery("scheduling-test", set_as_current=False)
    assert app.conf.beat_schedule == {}
    job = PeriodicJob(app, name="sweep", task="orders.sweep_expired_orders", interval=300)

    job.start()
    job.start()

    assert job.running
    entry = app.conf.beat_schedule["sweep"]
    assert entry["task"] == "orders.sweep_expired_orders"
    assert entry["options"]["expires"] == pytest.approx(270)

    job.stop()

    assert not job.running
    assert "sweep" not in app.conf.beat_schedule
