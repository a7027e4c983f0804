"""Admin registration for slots."""

from __future__ import annotations

from django.contrib import admin

from .models import Slot


@admin.register(Slot)
class SlotAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "creator_handle",
        "team_member_name",
        "start_time",
        "end_time",
        "is_available",
        "claimed_at",
    )
    list_filter = ("is_available", "creator_handle")
    search_fields = ("creator_handle", "team_member_name")
    # Availability is owned by the allocator.
    readonly_fields = ("is_available", "claimed_at", "created_at")

    def delete_queryset(self, request, queryset):
        # Bulk delete skips Slot.delete() and its active-booking check.
        for slot in queryset:
            slot.delete()
