from django.contrib import admin  # type: ignore

from .models import DirectMessage


@admin.register(DirectMessage)
class DirectMessageAdmin(admin.ModelAdmin):
    list_display = ("id", "sender", "recipient", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("body", "sender__email", "recipient__email")
    raw_id_fields = ("sender", "recipient")
