from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "guest", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("comment", "host_reply", "guest__email", "property__name")
    raw_id_fields = ("booking", "guest", "host", "property")
