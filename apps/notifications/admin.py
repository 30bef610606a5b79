from django.contrib import admin  # type: ignore

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "type", "title", "priority", "is_read", "created_at")
    list_filter = ("type", "priority", "is_read", "role")
    search_fields = ("title", "message", "recipient__email")
    raw_id_fields = ("recipient", "sender", "order", "booking", "tour_booking", "product", "review", "property")
