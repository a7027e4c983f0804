"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.slots.allocator import slot_allocator

from .models import Booking
from .notifications import BookingNotice, get_notifier

logger = logging.getLogger(__name__)


@shared_task(name="bookings.deliver_booking_notification")
def deliver_booking_notification(booking_id: int, kind: str) -> bool:
    """
    Hand a booking notice to the notification collaborator.

    Runs after the booking has been committed. Delivery failures are logged
    and never affect the booking.
    """
    booking = Booking.objects.select_related("slot").filter(pk=booking_id).first()
    if booking is None:
        logger.info("Booking %s vanished before %s notice was sent", booking_id, kind)
        return False

    try:
        get_notifier().notify(BookingNotice.from_booking(kind, booking))
    except Exception as e:
        logger.error("Failed to deliver %s notice for booking %s: %s", kind, booking_id, e, exc_info=True)
        return False
    return True


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="bookings.release_stranded_slots")
def release_stranded_slots() -> dict[str, int]:
    """
    Free slots left claimed without a booking.

    Runs every minute through Celery Beat. Only slots claimed longer ago than
    BOOKING_STRANDED_SLOT_GRACE_MINUTES are considered, so a reservation whose
    booking row is still being written is never touched.

    Returns:
        dict: {"released": number of slots freed}
    """
    grace = timedelta(minutes=getattr(settings, "BOOKING_STRANDED_SLOT_GRACE_MINUTES", 10))
    released = slot_allocator.release_stranded(timezone.now() - grace)
    return {"released": released}
