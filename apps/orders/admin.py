from django.contrib import admin  # type: ignore

from .models import Order, OrderHistoryEntry, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "name", "unit_price", "quantity", "total_price")


class OrderHistoryInline(admin.TabularInline):
    model = OrderHistoryEntry
    extra = 0
    readonly_fields = ("status", "note", "images", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("code", "user", "payment_method", "payment_status", "order_status", "grand_total", "created_at")
    list_filter = ("payment_method", "payment_status", "order_status", "shipping_method")
    search_fields = ("code", "user__email", "full_name", "phone")
    readonly_fields = ("code", "grand_total", "payment_reference", "created_at", "updated_at")
    inlines = [OrderItemInline, OrderHistoryInline]
