"""Tour and tour booking models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.codes import dated_code, save_with_unique_code


class Tour(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True, blank=True)
    description = models.TextField(blank=True)
    duration_days = models.PositiveSmallIntegerField(default=1)
    duration_nights = models.PositiveSmallIntegerField(default=0)
    departure_point = models.CharField(max_length=255, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    is_active = models.BooleanField(default=True)
    sold_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base = slugify(self.name) or "tour"
            slug = base
            counter = 1
            while Tour.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                counter += 1
                slug = f"{base}-{counter}"
            self.slug = slug
        super().save(*args, **kwargs)

    def activate(self) -> None:
        self.is_active = True
        self.save(update_fields=["is_active", "updated_at"])

    def deactivate(self) -> None:
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])


def generate_tour_booking_code() -> str:
    return dated_code("HDTB", 4)


class TourBooking(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tour_bookings",
    )
    tour = models.ForeignKey(Tour, on_delete=models.PROTECT, related_name="bookings")
    code = models.CharField(max_length=20, unique=True, editable=False)
    date_from = models.DateField()
    date_to = models.DateField()
    total_seats = models.PositiveIntegerField()
    available_seats = models.PositiveIntegerField(blank=True)
    note = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_seats__lte=models.F("total_seats")),
                name="tour_booking_seats_within_total",
            ),
            models.CheckConstraint(
                condition=models.Q(date_to__gte=models.F("date_from")),
                name="tour_booking_dates_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"Tour booking {self.code}"

    def clean(self) -> None:
        super().clean()
        if self.available_seats is not None and self.total_seats is not None:
            if self.available_seats > self.total_seats:
                raise ValidationError({"available_seats": _("Cannot exceed total seats.")})
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValidationError({"date_to": _("End date must not be before the start date.")})

    def save(self, *args, **kwargs):  # type: ignore
        if self.available_seats is None:
            self.available_seats = self.total_seats
        if self.code:
            super().save(*args, **kwargs)
            return
        persist = super().save
        save_with_unique_code(self, "code", generate_tour_booking_code, lambda: persist(*args, **kwargs))


class TourCustomer(models.Model):
    """A representative and the members travelling with them."""

    class PersonType(models.TextChoices):
        ADULT = "adult", _("Adult")
        CHILD = "child", _("Child")
        BABY = "baby", _("Baby")

    booking = models.ForeignKey(TourBooking, on_delete=models.CASCADE, related_name="customers")
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    type = models.CharField(max_length=10, choices=PersonType.choices, default=PersonType.ADULT)
    email = models.EmailField(blank=True)
    notes = models.TextField(blank=True)
    members = models.JSONField(default=list, blank=True)
    total_adults = models.PositiveIntegerField(default=0)
    total_children = models.PositiveIntegerField(default=0)
    total_babies = models.PositiveIntegerField(default=0)
    total_people = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.full_name

    def recount(self) -> None:
        counts = {self.PersonType.ADULT: 0, self.PersonType.CHILD: 0, self.PersonType.BABY: 0}
        for person_type in [self.type, *(member.get("type", self.PersonType.ADULT) for member in self.members)]:
            if person_type not in counts:
                person_type = self.PersonType.ADULT
            counts[person_type] += 1
        self.total_adults = counts[self.PersonType.ADULT]
        self.total_children = counts[self.PersonType.CHILD]
        self.total_babies = counts[self.PersonType.BABY]
        self.total_people = self.total_adults + self.total_children + self.total_babies

    def save(self, *args, **kwargs):  # type: ignore
        self.recount()
        super().save(*args, **kwargs)
