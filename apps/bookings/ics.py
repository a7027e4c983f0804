"""
Calendar export

Renders a confirmed booking as an iCalendar (RFC 5545) VEVENT. Everything
except ``export_booking_event`` is a pure function of its arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain import state_machine
from apps.bookings.exceptions import BookingNotConfirmed, SlotNotFound
from shared.domain.value_objects import TimeWindow

from .application.queries import get_booking

CONTENT_TYPE = "text/calendar; charset=utf-8"


def escape_text(value: str | None) -> str:
    """Escape a TEXT value: backslash, newline, comma and semicolon."""

    return (
        (value or "")
        .replace("\\", "\\\\")
        .replace("\r\n", "\n")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def format_timestamp(moment: datetime) -> str:
    """UTC form ``YYYYMMDDTHHMMSSZ``. Naive datetimes are taken as UTC."""

    if timezone.is_naive(moment):
        moment = moment.replace(tzinfo=dt_timezone.utc)
    return moment.astimezone(dt_timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def fold_line(line: str, limit: int = 75) -> str:
    """
    Fold a content line so no physical line exceeds ``limit`` octets.

    Continuation lines start with a single space, which counts toward the
    limit. Multi-byte characters are never split.
    """
    if len(line.encode("utf-8")) <= limit:
        return line

    parts: list[str] = []
    current, size = "", 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > limit:
            parts.append(current)
            current, size = " ", 1
        current += char
        size += width
    parts.append(current)
    return "\r\n".join(parts)


@dataclass(frozen=True)
class CalendarEvent:
    uid: str
    window: TimeWindow
    summary: str
    description: str
    stamp: datetime
    prodid: str = "-//Slotbook//Booking//EN"

    @property
    def content(self) -> str:
        return render_event(self)

    @property
    def filename(self) -> str:
        return f"booking-{self.uid.split('@', 1)[0]}.ics"


def render_event(event: CalendarEvent) -> str:
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{event.prodid}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{escape_text(event.uid)}",
        f"DTSTAMP:{format_timestamp(event.stamp)}",
        f"DTSTART:{format_timestamp(event.window.start)}",
        f"DTEND:{format_timestamp(event.window.end)}",
        f"SUMMARY:{escape_text(event.summary)}",
        f"DESCRIPTION:{escape_text(event.description)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(fold_line(line) for line in lines) + "\r\n"


def build_event(booking, *, now: datetime | None = None) -> CalendarEvent:
    """
    Build the event for a booking.

    Raises:
        BookingNotConfirmed: the booking is pending or cancelled
        SlotNotFound: the booking has no slot to take the time window from
    """
    if booking.status != state_machine.CONFIRMED:
        raise BookingNotConfirmed(booking_id=booking.pk, status=booking.status)
    if booking.slot is None:
        raise SlotNotFound("Booking has no time slot.", booking_id=booking.pk)

    title = (booking.item_title or "").strip() or f"Appointment with @{booking.handle}"
    description = f"Booking confirmed.\nHandle: @{booking.handle}\n"
    if booking.customer_name:
        description += f"Name: {booking.customer_name}\n"

    domain = getattr(settings, "BOOKING_CALENDAR_UID_DOMAIN", "slotbook")
    return CalendarEvent(
        uid=f"{booking.pk}@{domain}",
        window=booking.slot.window,
        summary=title,
        description=description,
        stamp=now or timezone.now(),
        prodid=getattr(settings, "BOOKING_CALENDAR_PRODID", CalendarEvent.prodid),
    )


def export_booking_event(booking_id: int, *, now: datetime | None = None) -> CalendarEvent:
    return build_event(get_booking(booking_id), now=now)
