"""Slot store: bookable time windows published by providers."""

from __future__ import annotations

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeWindow

from .exceptions import SlotInUse


def normalize_handle(handle: str | None) -> str:
    """Canonical form of a provider handle: trimmed, no leading '@', lower-case."""

    return (handle or "").strip().lstrip("@").lower()


class SlotQuerySet(models.QuerySet):
    def for_handle(self, handle: str) -> "SlotQuerySet":
        return self.filter(creator_handle=normalize_handle(handle))


class Slot(models.Model):
    """
    A bookable window ``[start_time, end_time)`` of one provider.

    ``is_available`` is the only contended piece of state in the system and
    is written exclusively by :class:`apps.slots.allocator.SlotAllocator`.
    Rows are produced in bulk by the availability generator.
    """

    creator_handle = models.CharField(max_length=64, db_index=True)
    team_member_id = models.CharField(max_length=64, blank=True, null=True)
    team_member_name = models.CharField(max_length=120, blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    is_available = models.BooleanField(default=True)
    claimed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the slot was last reserved; cleared on release."),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = SlotQuerySet.as_manager()

    class Meta:
        verbose_name = _("Slot")
        verbose_name_plural = _("Slots")
        ordering = ["start_time", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="slot_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["creator_handle", "start_time"], name="slots_slot_creator_2f6a1e_idx"),
            models.Index(fields=["is_available", "claimed_at"], name="slots_slot_is_avai_8c1d3b_idx"),
        ]

    def __str__(self) -> str:
        return f"@{self.creator_handle} {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)

    def clean(self) -> None:
        self.creator_handle = normalize_handle(self.creator_handle)
        if not self.creator_handle:
            raise ValidationError({"creator_handle": _("Handle is required.")})
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("Slot end must be after its start."))

    def save(self, *args, **kwargs):  # type: ignore
        self.creator_handle = normalize_handle(self.creator_handle)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        from apps.bookings.models import Booking  # local import to avoid circular

        if Booking.objects.active().filter(slot_id=self.pk).exists():
            raise SlotInUse(slot_id=self.pk)
        return super().delete(*args, **kwargs)
