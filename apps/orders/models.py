"""Order models.

An order snapshots everything checkout saw: line prices and names, the
shipping address and the computed totals. ``grand_total`` is derived on
every save and the database refuses rows where it does not add up.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.codes import dated_code, save_with_unique_code


def generate_order_code() -> str:
    return dated_code("HD", 3)


class Order(models.Model):
    class ShippingMethod(models.TextChoices):
        STANDARD = "standard", _("Standard")
        EXPRESS = "express", _("Express")

    class PaymentMethod(models.TextChoices):
        COD = "cod", _("Cash on delivery")
        CARD = "card", _("Card")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PROCESSING = "processing", _("Processing")
        CONFIRMED = "confirmed", _("Confirmed")
        SHIPPING = "shipping", _("Shipping")
        DELIVERED = "delivered", _("Delivered")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")
        CANCEL_REQUEST = "cancel_request", _("Cancellation requested")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orders",
    )
    code = models.CharField(max_length=20, unique=True, editable=False)

    # Shipping address snapshot
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20)
    address_line = models.CharField(max_length=255)
    province = models.CharField(max_length=120)
    district = models.CharField(max_length=120, blank=True)

    shipping_method = models.CharField(
        max_length=10, choices=ShippingMethod.choices, default=ShippingMethod.STANDARD
    )
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    order_status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_reference = models.BigIntegerField(null=True, blank=True, unique=True)

    items_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    promo_code = models.CharField(max_length=50, blank=True)
    order_note = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(
                    grand_total=models.F("items_total")
                    + models.F("shipping_fee")
                    + models.F("tax")
                    - models.F("discount")
                ),
                name="order_grand_total_adds_up",
            ),
            models.CheckConstraint(condition=models.Q(discount__gte=0), name="order_discount_non_negative"),
        ]
        indexes = [
            models.Index(fields=["payment_method", "payment_status", "order_status", "created_at"]),
            models.Index(fields=["user", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"Order {self.code}"

    def compute_grand_total(self) -> Decimal:
        return (
            Decimal(self.items_total)
            + Decimal(self.shipping_fee)
            + Decimal(self.tax)
            - Decimal(self.discount)
        )

    def save(self, *args, **kwargs):  # type: ignore
        self.grand_total = self.compute_grand_total()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "grand_total" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "grand_total"]
        if self.code:
            super().save(*args, **kwargs)
            return
        persist = super().save
        save_with_unique_code(self, "code", generate_order_code, lambda: persist(*args, **kwargs))

    @property
    def is_unpaid(self) -> bool:
        return (
            self.payment_status == self.PaymentStatus.PENDING
            and self.order_status == self.Status.PENDING
        )


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    name = models.CharField(max_length=255)
    image = models.URLField(blank=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.PositiveIntegerField()
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="order_item_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"

    def save(self, *args, **kwargs):  # type: ignore
        self.total_price = Decimal(self.unit_price) * self.quantity
        super().save(*args, **kwargs)


class OrderHistoryEntry(models.Model):
    """One line of the order's status log."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="history")
    status = models.CharField(max_length=20, choices=Order.Status.choices)
    note = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = _("Order history")

    def __str__(self) -> str:
        return f"{self.order_id}: {self.status}"
