"""Read-side lookups used by the public page, the dashboard and notifiers."""

from __future__ import annotations

from apps.bookings.exceptions import BookingNotFound, BookingValidationError
from apps.bookings.models import Booking
from shared.infrastructure.database import storage_guard


def get_booking(booking_id: int) -> Booking:
    with storage_guard("booking lookup"):
        booking = Booking.objects.select_related("slot").filter(pk=booking_id).first()
    if booking is None:
        raise BookingNotFound(booking_id=booking_id)
    return booking


def get_booking_by_session(session_id: str) -> Booking:
    """Find the booking created for an external payment session."""

    session_id = (session_id or "").strip()
    if not session_id:
        raise BookingValidationError("Missing session_id.", errors={"session_id": "This field is required."})
    with storage_guard("booking lookup"):
        booking = Booking.objects.select_related("slot").filter(payment_session_id=session_id).first()
    if booking is None:
        raise BookingNotFound(session_id=session_id)
    return booking


def list_bookings(handle: str):
    with storage_guard("booking list"):
        return list(Booking.objects.for_handle(handle).select_related("slot"))
