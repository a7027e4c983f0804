"""Booking store."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Money


def generate_checkin_code() -> str:
    return secrets.token_hex(4).upper()


def default_currency() -> str:
    return getattr(settings, "BOOKING_DEFAULT_CURRENCY", "usd")


class BookingQuerySet(models.QuerySet):
    def active(self) -> "BookingQuerySet":
        """Bookings that hold their slot."""
        return self.filter(status__in=Booking.ACTIVE_STATUSES)

    def for_handle(self, handle: str) -> "BookingQuerySet":
        from apps.slots.models import normalize_handle

        return self.filter(handle=normalize_handle(handle))


class Booking(models.Model):
    """A customer's claim on a provider's slot."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED)

    handle = models.CharField(max_length=64, db_index=True)
    slot = models.ForeignKey(
        "slots.Slot",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
        help_text=_("Empty for walk-ins."),
    )
    team_member_id = models.CharField(max_length=64, blank=True, null=True)
    team_member_name = models.CharField(max_length=120, blank=True)
    customer_name = models.CharField(max_length=120)
    customer_email = models.EmailField(max_length=254)
    customer_phone = models.CharField(max_length=32, blank=True)
    item_title = models.CharField(max_length=200, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default=default_currency)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checkin_code = models.CharField(max_length=16, default=generate_checkin_code, editable=False)
    payment_session_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["slot"],
                condition=models.Q(status__in=["pending", "confirmed"]),
                name="booking_one_active_per_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["handle", "status"], name="bookings_bo_handle_4e9b2c_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} @{self.handle} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    @property
    def price(self) -> Money | None:
        if self.amount is None:
            return None
        return Money(Decimal(self.amount), self.currency)
