"""Notification model.

A notification is addressed to one recipient, typed by the event that
produced it and optionally linked to the order, booking, product, review
or property it is about. Recipients only ever toggle the read state or
delete their notifications.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    class Type(models.TextChoices):
        ORDER_CONFIRMED = "order_confirmed", _("Order confirmed")
        ORDER_SHIPPING = "order_shipping", _("Order shipping")
        ORDER_DELIVERED = "order_delivered", _("Order delivered")
        ORDER_CANCELLED = "order_cancelled", _("Order cancelled")
        ORDER_RETURN_REQUEST = "order_return_request", _("Order cancellation request")
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking confirmed")
        BOOKING_CANCELLED = "booking_cancelled", _("Booking cancelled")
        REVIEW_REPLY = "review_reply", _("Review reply")
        PRODUCT_AVAILABLE = "product_available", _("Product available")
        PROMOTION = "promotion", _("Promotion")
        SYSTEM = "system", _("System")
        NEW_BOOKING_REQUEST = "new_booking_request", _("New booking request")
        BOOKING_PAYMENT_RECEIVED = "booking_payment_received", _("Booking payment received")
        GUEST_CHECKED_IN = "guest_checked_in", _("Guest checked in")
        GUEST_CHECKED_OUT = "guest_checked_out", _("Guest checked out")
        GUEST_CANCELLED_BOOKING = "guest_cancelled_booking", _("Guest cancelled booking")
        NEW_REVIEW_RECEIVED = "new_review_received", _("New review received")
        PROPERTY_APPROVED = "property_approved", _("Property approved")
        PROPERTY_REJECTED = "property_rejected", _("Property rejected")
        PAYOUT_PROCESSED = "payout_processed", _("Payout processed")
        BOOKING_REMINDER = "booking_reminder", _("Booking reminder")
        GUEST_MESSAGE = "guest_message", _("Message")
        PROPERTY_PERFORMANCE = "property_performance", _("Property performance")

    class ActionType(models.TextChoices):
        VIEW_ORDER = "view_order", _("View order")
        VIEW_BOOKING = "view_booking", _("View booking")
        VIEW_PRODUCT = "view_product", _("View product")
        VIEW_REVIEW = "view_review", _("View review")
        VIEW_PROPERTY = "view_property", _("View property")
        VIEW_MESSAGE = "view_message", _("View message")
        NONE = "none", _("None")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")

    class Role(models.TextChoices):
        GUEST = "guest", _("Guest")
        HOST = "host", _("Host")
        ADMIN = "admin", _("Admin")
        ALL = "all", _("All")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_notifications",
    )
    type = models.CharField(max_length=40, choices=Type.choices)
    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)

    order = models.ForeignKey(
        "orders.Order", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    booking = models.ForeignKey(
        "bookings.Booking", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    tour_booking = models.ForeignKey(
        "tours.TourBooking", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    product = models.ForeignKey(
        "catalog.Product", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    review = models.ForeignKey(
        "reviews.Review", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    property = models.ForeignKey(
        "properties.Property", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    link = models.CharField(max_length=255, blank=True)
    action_type = models.CharField(max_length=20, choices=ActionType.choices, default=ActionType.NONE)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.GUEST)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "is_read", "-created_at"]),
            models.Index(fields=["recipient", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.recipient_id}: {self.title}"

    def mark_read(self) -> bool:
        """Flag as read; returns False when it already was."""
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True
