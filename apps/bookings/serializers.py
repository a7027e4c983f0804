"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import CreateBookingCommand
from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """
    Reservation request from the public booking page.

    Only shapes the input; customer-field rules are enforced by
    CreateBookingHandler so that every entry point applies them.
    """

    handle = serializers.CharField(max_length=64)
    slot_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    customer_name = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    customer_email = serializers.CharField(max_length=254, required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    item_title = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False, allow_null=True)
    payment_session_id = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)

    def to_command(self) -> CreateBookingCommand:
        data = self.validated_data
        return CreateBookingCommand(
            handle=data["handle"],
            slot_id=data.get("slot_id"),
            customer_name=data.get("customer_name", ""),
            customer_email=data.get("customer_email", ""),
            customer_phone=data.get("customer_phone", ""),
            item_title=data.get("item_title", ""),
            amount=data.get("amount"),
            currency=data.get("currency"),
            payment_session_id=data.get("payment_session_id") or None,
        )


class BookingPublicSerializer(serializers.ModelSerializer):
    """Fields safe to show to anyone holding the booking id or payment session."""

    start_time = serializers.DateTimeField(source="slot.start_time", read_only=True, default=None)
    end_time = serializers.DateTimeField(source="slot.end_time", read_only=True, default=None)

    class Meta:
        model = Booking
        fields = [
            "id",
            "handle",
            "status",
            "customer_name",
            "item_title",
            "team_member_name",
            "start_time",
            "end_time",
            "amount",
            "currency",
            "checked_in",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Provider dashboard view of a booking."""

    slot_id = serializers.ReadOnlyField()
    start_time = serializers.DateTimeField(source="slot.start_time", read_only=True, default=None)
    end_time = serializers.DateTimeField(source="slot.end_time", read_only=True, default=None)

    class Meta:
        model = Booking
        fields = [
            "id",
            "handle",
            "slot_id",
            "start_time",
            "end_time",
            "team_member_id",
            "team_member_name",
            "customer_name",
            "customer_email",
            "customer_phone",
            "item_title",
            "amount",
            "currency",
            "status",
            "checked_in",
            "checked_in_at",
            "checkin_code",
            "payment_session_id",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class HandleSerializer(serializers.Serializer):
    """Provider handle carried by dashboard requests."""

    handle = serializers.CharField(max_length=64)


class CheckinSerializer(HandleSerializer):
    code = serializers.CharField(max_length=16, required=False, allow_blank=False)
