"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "handle",
        "customer_name",
        "item_title",
        "slot",
        "status",
        "checked_in",
        "amount",
        "created_at",
    )
    list_filter = ("status", "checked_in", "handle")
    search_fields = ("customer_name", "customer_email", "payment_session_id", "handle")
    # Status and slot changes go through the lifecycle handlers.
    readonly_fields = (
        "status",
        "slot",
        "checked_in",
        "checked_in_at",
        "checkin_code",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
