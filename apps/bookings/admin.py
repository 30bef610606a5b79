from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("code", "guest", "property", "site", "check_in", "check_out", "status", "payment_status", "total")
    list_filter = ("status", "payment_status")
    search_fields = ("code", "guest__email", "host__email", "property__name")
    readonly_fields = ("code", "created_at", "updated_at")
    raw_id_fields = ("guest", "host", "property", "site", "cancelled_by")
