"""
Wires the booking use cases into the message bus.

Called once from ``BookingsConfig.ready()``.
"""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.base import DomainEvent

from .application.checkin import CheckInBookingCommand, CheckInBookingHandler
from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    DeleteBookingCommand,
    DeleteBookingHandler,
)
from .domain.events import BookingConfirmed, BookingCreated

logger = logging.getLogger(__name__)

# Events the customer is told about. Cancellation notices are left to the caller.
NOTIFIED_EVENTS = {
    BookingCreated: "created",
    BookingConfirmed: "confirmed",
}


def enqueue_notification(event: DomainEvent) -> None:
    from .tasks import deliver_booking_notification

    kind = NOTIFIED_EVENTS[type(event)]
    deliver_booking_notification.delay(event.booking_id, kind)
    logger.debug("Queued %s notice for booking %s", kind, event.booking_id)


def bootstrap(bus: MessageBus = message_bus) -> MessageBus:
    bus.register_command_handler(CreateBookingCommand, CreateBookingHandler().handle, replace=True)
    bus.register_command_handler(ConfirmBookingCommand, ConfirmBookingHandler().handle, replace=True)
    bus.register_command_handler(CancelBookingCommand, CancelBookingHandler().handle, replace=True)
    bus.register_command_handler(DeleteBookingCommand, DeleteBookingHandler().handle, replace=True)
    bus.register_command_handler(CheckInBookingCommand, CheckInBookingHandler().handle, replace=True)

    for event_type in NOTIFIED_EVENTS:
        bus.register_event_handler(event_type, enqueue_notification)
    return bus
