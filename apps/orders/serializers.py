"""Serializers for orders."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .models import Order, OrderHistoryEntry, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "name", "image", "unit_price", "quantity", "total_price"]
        read_only_fields = fields


class OrderHistoryEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderHistoryEntry
        fields = ["status", "note", "images", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    history = OrderHistoryEntrySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "user",
            "full_name",
            "phone",
            "address_line",
            "province",
            "district",
            "shipping_method",
            "payment_method",
            "payment_status",
            "order_status",
            "payment_reference",
            "items_total",
            "shipping_fee",
            "tax",
            "discount",
            "grand_total",
            "promo_code",
            "order_note",
            "cancelled_at",
            "items",
            "history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    product = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class ShippingAddressSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=20)
    address_line = serializers.CharField(max_length=255)
    province = serializers.CharField(max_length=120)
    district = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class CheckoutSerializer(serializers.Serializer):
    items = OrderLineSerializer(many=True, allow_empty=False)
    address = ShippingAddressSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)
    shipping_method = serializers.ChoiceField(
        choices=Order.ShippingMethod.choices, default=Order.ShippingMethod.STANDARD
    )
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    order_note = serializers.CharField(required=False, allow_blank=True, default="")


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    images = serializers.ListField(child=serializers.URLField(), required=False, default=list)


class OrderTotalsSerializer(serializers.Serializer):
    shipping_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False)
    order_note = serializers.CharField(required=False, allow_blank=True)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentWebhookSerializer(serializers.Serializer):
    reference = serializers.IntegerField()
    status = serializers.ChoiceField(choices=["PAID", "FAILED"])
