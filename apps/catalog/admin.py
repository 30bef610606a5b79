"""Admin registration for the catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "is_active")
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "deal_price", "stock", "sold_count", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "slug")
    readonly_fields = ("sold_count", "created_at", "updated_at")
