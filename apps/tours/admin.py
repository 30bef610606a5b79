from django.contrib import admin  # type: ignore

from .models import Tour, TourBooking, TourCustomer


@admin.register(Tour)
class TourAdmin(admin.ModelAdmin):
    list_display = ("name", "duration_days", "duration_nights", "price", "is_active", "sold_count")
    list_filter = ("is_active",)
    search_fields = ("name", "departure_point")
    prepopulated_fields = {"slug": ("name",)}


class TourCustomerInline(admin.StackedInline):
    model = TourCustomer
    extra = 0
    readonly_fields = ("total_adults", "total_children", "total_babies", "total_people")


@admin.register(TourBooking)
class TourBookingAdmin(admin.ModelAdmin):
    list_display = ("code", "tour", "user", "date_from", "date_to", "total_seats", "available_seats", "status")
    list_filter = ("status", "payment_status")
    search_fields = ("code", "user__email", "tour__name")
    readonly_fields = ("code", "created_at", "updated_at")
    inlines = [TourCustomerInline]
