"""Property domain models for TrailHub.

A host lists a property (a campground) in a location; each property offers
one or more sites, the unit guests actually book. Site availability holds
blocked date ranges, either entered by the host or created by bookings.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Location(models.Model):
    name = models.CharField(max_length=120, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Amenity(models.Model):
    """Something a property offers (toilets, fire pit, wifi ...)."""

    class Category(models.TextChoices):
        BASIC = "basic", _("Basic")
        FACILITIES = "facilities", _("Facilities")
        ACTIVITIES = "activities", _("Activities")
        SAFETY = "safety", _("Safety")

    name = models.CharField(max_length=100, unique=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.BASIC)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = _("Amenities")
        ordering = ["category", "name"]

    def __str__(self) -> str:
        return self.name


class Property(models.Model):
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True, blank=True)
    description = models.TextField(blank=True)
    location = models.ForeignKey(
        Location,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    address = models.CharField(max_length=255, blank=True)
    amenities = models.ManyToManyField(Amenity, related_name="properties", blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["host", "is_active"]),
        ]

    def __str__(self) -> str:
        return self.name

    def activate(self) -> None:
        if not self.is_active:
            self.is_active = True
            self.save(update_fields=["is_active", "updated_at"])

    def deactivate(self) -> None:
        if self.is_active:
            self.is_active = False
            self.save(update_fields=["is_active", "updated_at"])

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.name)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class Site(models.Model):
    """A bookable pitch, cabin or RV spot of a property."""

    class AccommodationType(models.TextChoices):
        TENT = "tent", _("Tent")
        RV = "rv", _("RV")
        CABIN = "cabin", _("Cabin")
        GLAMPING = "glamping", _("Glamping")

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="sites")
    name = models.CharField(max_length=255)
    accommodation_type = models.CharField(
        max_length=20, choices=AccommodationType.choices, default=AccommodationType.TENT
    )

    included_guests = models.PositiveSmallIntegerField(default=2)
    max_guests = models.PositiveSmallIntegerField(default=4, validators=[MinValueValidator(1)])
    max_pets = models.PositiveSmallIntegerField(default=0)

    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    weekend_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Friday and Saturday nights; falls back to the base price."),
    )
    cleaning_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    pet_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    additional_guest_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    minimum_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    maximum_nights = models.PositiveSmallIntegerField(null=True, blank=True)
    instant_book = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["property_id", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(included_guests__lte=models.F("max_guests")),
                name="site_included_guests_within_max",
            ),
            models.CheckConstraint(
                condition=models.Q(maximum_nights__isnull=True)
                | models.Q(maximum_nights__gte=models.F("minimum_nights")),
                name="site_night_limits_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.property.name}: {self.name}"

    def nightly_rate(self, weekend: bool) -> Decimal:
        if weekend and self.weekend_price is not None:
            return self.weekend_price
        return self.base_price


class SiteAvailability(models.Model):
    """A blocked date range; ``end_date`` is exclusive like a check-out day."""

    class Source(models.TextChoices):
        MANUAL = "manual", _("Blocked by host")
        BOOKING = "booking", _("Booking")

    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="blocks")
    start_date = models.DateField()
    end_date = models.DateField()
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.MANUAL)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="blocks",
    )
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = _("Site availability")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="site_availability_valid_range",
            ),
        ]
        indexes = [
            models.Index(fields=["site", "start_date", "end_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.site_id}: {self.start_date} - {self.end_date} ({self.source})"
