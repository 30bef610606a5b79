"""Tests for tour bookings: codes, customer totals and status changes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.tours import services
from apps.tours.models import Tour, TourBooking, TourCustomer
from apps.users.models import User
from shared.exceptions import InvalidTransitionError


@pytest.fixture
def traveller(db):
    return User.objects.create_user(email="traveller@example.com", password="TravelPass123")


@pytest.fixture
def tour(db):
    return Tour.objects.create(name="Langbiang trek", price=Decimal("1200000"), duration_days=2, duration_nights=1)


def book(user, tour, **kwargs):
    kwargs.setdefault("total_seats", 10)
    return services.create_tour_booking(
        user, tour=tour, date_from=date(2026, 11, 1), date_to=date(2026, 11, 2), **kwargs
    )


@pytest.mark.django_db
def test_booking_gets_code_and_full_seat_pool(traveller, tour):
    booking = book(traveller, tour)

    assert booking.code.startswith("HDTB")
    assert len(booking.code) == len("HDTB") + 6 + 4
    assert booking.available_seats == 10


@pytest.mark.django_db
def test_available_seats_cannot_exceed_total(traveller, tour):
    with pytest.raises(ValidationError):
        book(traveller, tour, total_seats=4, available_seats=5)


@pytest.mark.django_db
def test_customer_totals_are_derived_from_types(traveller, tour):
    booking = book(
        traveller,
        tour,
        customers=[
            {
                "full_name": "Le Van C",
                "type": "adult",
                "members": [
                    {"full_name": "Le Thi D", "type": "adult"},
                    {"full_name": "Le Minh E", "type": "child"},
                    {"full_name": "Le Bao F", "type": "baby"},
                ],
            }
        ],
    )

    customer = booking.customers.get()
    assert (customer.total_adults, customer.total_children, customer.total_babies) == (2, 1, 1)
    assert customer.total_people == customer.total_adults + customer.total_children + customer.total_babies


@pytest.mark.django_db
def test_recount_runs_on_every_save(traveller, tour):
    booking = book(traveller, tour)
    customer = TourCustomer.objects.create(booking=booking, full_name="Solo", type="child")
    assert customer.total_people == 1

    customer.members = [{"full_name": "Parent", "type": "adult"}]
    customer.save()

    customer.refresh_from_db()
    assert (customer.total_adults, customer.total_children, customer.total_people) == (1, 1, 2)


@pytest.mark.django_db
def test_cancelling_keeps_available_seats(traveller, tour):
    booking = book(traveller, tour, total_seats=10, available_seats=10)

    booking = services.cancel_tour_booking(booking, traveller)

    booking.refresh_from_db()
    assert booking.status == TourBooking.Status.CANCELLED
    assert booking.available_seats == 10


@pytest.mark.django_db
def test_completed_booking_is_terminal(traveller, tour):
    booking = book(traveller, tour)
    services.update_tour_booking_status(booking, TourBooking.Status.COMPLETED)

    with pytest.raises(InvalidTransitionError):
        services.update_tour_booking_status(booking, TourBooking.Status.CANCELLED)

    tour.refresh_from_db()
    assert tour.sold_count == 1


class TourBookingAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="hiker@example.com", password="HikerPass123")
        self.admin = User.objects.create_user(
            email="ops@example.com", password="OpsPass12345", role=User.RoleChoices.ADMIN
        )
        self.tour = Tour.objects.create(name="Mekong kayak", price=Decimal("900000"))

    def test_create_and_replace_customers(self) -> None:
        self.client.force_authenticate(self.user)
        created = self.client.post(
            reverse("tour-booking-list"),
            {
                "tour": self.tour.id,
                "date_from": "2026-12-01",
                "date_to": "2026-12-03",
                "total_seats": 4,
                "customers": [{"full_name": "Pham G", "type": "adult"}],
            },
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        booking_id = created.data["data"]["id"]

        response = self.client.put(
            reverse("tour-booking-customers", args=[booking_id]),
            {
                "customers": [
                    {"full_name": "Pham G", "type": "adult", "members": [{"full_name": "Pham H", "type": "child"}]}
                ]
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        customers = response.data["data"]["customers"]
        self.assertEqual(len(customers), 1)
        self.assertEqual(customers[0]["total_people"], 2)

    def test_only_admin_sets_status(self) -> None:
        booking = services.create_tour_booking(
            self.user, tour=self.tour, date_from=date(2026, 12, 1), date_to=date(2026, 12, 2), total_seats=2
        )
        url = reverse("tour-booking-set-status", args=[booking.id])

        self.client.force_authenticate(self.user)
        denied = self.client.post(url, {"status": "completed"}, format="json")
        self.client.force_authenticate(self.admin)
        allowed = self.client.post(url, {"status": "completed"}, format="json")

        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(allowed.status_code, status.HTTP_200_OK, allowed.data)
        self.assertEqual(allowed.data["data"]["status"], "completed")

    def test_admin_deactivates_tour(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("tour-deactivate", args=[self.tour.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.tour.refresh_from_db()
        self.assertFalse(self.tour.is_active)
