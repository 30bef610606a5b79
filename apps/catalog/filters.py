"""FilterSet definitions for product listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Product


class ProductFilterSet(django_filters.FilterSet):
    category = django_filters.NumberFilter(field_name="category_id")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    search = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = Product
        fields = ["category"]

    def filter_in_stock(self, queryset, name, value):  # type: ignore
        if value:
            return queryset.filter(stock__gt=0)
        return queryset
