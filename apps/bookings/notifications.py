"""
Notification collaborator interface.

SMS/email delivery lives outside this service. A notifier receives a
``BookingNotice`` snapshot after the booking reached a stable state; the
concrete class is chosen with the ``BOOKING_NOTIFIER`` setting.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from functools import lru_cache
import logging

from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingNotice:
    kind: str
    booking_id: int
    handle: str
    status: str
    customer_name: str
    customer_email: str
    customer_phone: str
    item_title: str
    start_time: datetime | None
    end_time: datetime | None
    price: str | None

    @classmethod
    def from_booking(cls, kind: str, booking) -> "BookingNotice":
        slot = booking.slot
        price = booking.price
        return cls(
            kind=kind,
            booking_id=booking.pk,
            handle=booking.handle,
            status=booking.status,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            item_title=booking.item_title,
            start_time=slot.start_time if slot else None,
            end_time=slot.end_time if slot else None,
            price=str(price) if price else None,
        )

    def as_dict(self) -> dict:
        return asdict(self)


class BookingNotifier:
    """Base class for notification backends."""

    def notify(self, notice: BookingNotice) -> None:
        raise NotImplementedError


class LoggingNotifier(BookingNotifier):
    """Writes notices to the log instead of sending them."""

    def notify(self, notice: BookingNotice) -> None:
        logger.info(
            "Booking notice %s for booking %s (@%s) to %s",
            notice.kind, notice.booking_id, notice.handle, notice.customer_email,
        )


class MemoryNotifier(BookingNotifier):
    """Keeps notices in memory; used by tests."""

    def __init__(self) -> None:
        self.sent: list[BookingNotice] = []

    def notify(self, notice: BookingNotice) -> None:
        self.sent.append(notice)


@lru_cache(maxsize=None)
def _load_notifier(path: str) -> BookingNotifier:
    return import_string(path)()


def get_notifier() -> BookingNotifier:
    """The notifier named by BOOKING_NOTIFIER; one instance per dotted path."""
    path = getattr(settings, "BOOKING_NOTIFIER", "apps.bookings.notifications.LoggingNotifier")
    return _load_notifier(path)
