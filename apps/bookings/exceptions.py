"""
Errors raised by the booking lifecycle, checkin gate and calendar export.

Raised in the application layer and turned into HTTP responses by
``BookingViewSet.handle_exception``.
"""

from __future__ import annotations

from apps.slots.exceptions import SlotConflict, SlotInUse, SlotNotFound
from shared.domain.exceptions import (
    Conflict,
    DependencyFailure,
    InvalidTransition,
    NotFound,
    OwnershipMismatch,
    ValidationFailed,
)

__all__ = [
    "BookingNotConfirmed",
    "BookingNotFound",
    "BookingValidationError",
    "Conflict",
    "DependencyFailure",
    "InvalidTransition",
    "NotFound",
    "OwnershipMismatch",
    "SlotConflict",
    "SlotInUse",
    "SlotNotFound",
]


class BookingNotFound(NotFound):
    code = "booking_not_found"
    default_message = "Booking not found."


class BookingValidationError(ValidationFailed):
    default_message = "Missing or invalid customer details."


class BookingNotConfirmed(InvalidTransition):
    code = "not_confirmed"
    default_message = "Booking not confirmed yet."
