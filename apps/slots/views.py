"""Read-only API over the slot store."""

from __future__ import annotations

from django_filters import rest_framework as filters  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore

from .models import Slot, normalize_handle
from .serializers import SlotSerializer


class SlotFilter(filters.FilterSet):
    handle = filters.CharFilter(method="filter_handle")
    available = filters.BooleanFilter(field_name="is_available")
    start_after = filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    start_before = filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="lt")

    class Meta:
        model = Slot
        fields = ["team_member_id"]

    def filter_handle(self, queryset, name, value):
        return queryset.filter(creator_handle=normalize_handle(value))


class SlotViewSet(viewsets.ReadOnlyModelViewSet):
    """Slots shown on a provider's public booking page."""

    queryset = Slot.objects.all()
    serializer_class = SlotSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = SlotFilter
