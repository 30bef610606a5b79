from django.contrib import admin  # type: ignore

from .models import Amenity, Location, Property, Site, SiteAvailability


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    search_fields = ("name",)


@admin.register(Amenity)
class AmenityAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "is_active")
    list_filter = ("category", "is_active")


class SiteInline(admin.TabularInline):
    model = Site
    extra = 0
    fields = ("name", "accommodation_type", "max_guests", "base_price", "instant_book", "is_active")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "host", "location", "is_active", "created_at")
    list_filter = ("is_active", "location")
    search_fields = ("name", "host__email", "address")
    filter_horizontal = ("amenities",)
    inlines = [SiteInline]


@admin.register(SiteAvailability)
class SiteAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("site", "start_date", "end_date", "source", "booking")
    list_filter = ("source",)
