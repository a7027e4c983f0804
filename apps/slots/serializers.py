"""Serializers for the slot store."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Slot


class SlotSerializer(serializers.ModelSerializer):
    """Public view of a slot. ``is_available`` is advisory."""

    class Meta:
        model = Slot
        fields = [
            "id",
            "creator_handle",
            "team_member_id",
            "team_member_name",
            "start_time",
            "end_time",
            "is_available",
        ]
        read_only_fields = fields
