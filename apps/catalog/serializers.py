"""Serializers for the catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug", "is_active"]
        read_only_fields = ["slug"]


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.ReadOnlyField(source="category.name")
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "category",
            "category_name",
            "price",
            "deal_price",
            "unit_price",
            "stock",
            "image",
            "is_active",
            "sold_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "sold_count", "created_at", "updated_at"]

    def validate(self, attrs):  # type: ignore
        price = attrs.get("price", getattr(self.instance, "price", None))
        deal_price = attrs.get("deal_price", getattr(self.instance, "deal_price", None))
        if price is not None and deal_price is not None and deal_price > price:
            raise serializers.ValidationError({"deal_price": "Deal price cannot exceed the price."})
        return attrs
