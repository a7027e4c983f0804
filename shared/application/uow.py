"""
Unit of Work

One database transaction plus the domain events recorded inside it. Events
reach the message bus only once the outermost transaction has committed.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Wraps ``transaction.atomic()`` and hands recorded events to
    ``transaction.on_commit()``, so subscribers never see a booking that
    was rolled back.

    Usage:
        with DjangoUnitOfWork() as uow:
            updated = Booking.objects.filter(pk=pk, status="pending").update(status="confirmed")
            if updated:
                uow.record(BookingConfirmed(aggregate_id=pk, booking_id=pk, handle=handle))
        # BookingConfirmed is published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publish()
            else:
                self._discard()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def record(self, event: DomainEvent):
        """Queue an event for publishing after commit"""
        self._events.append(event)

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._events)

    def _schedule_publish(self):
        events, self._events = self._events, []
        if events:
            logger.debug("Scheduling %d event(s) for after commit", len(events))
            transaction.on_commit(lambda: self._publish(events))

    def _discard(self):
        if self._events:
            logger.warning("Transaction rolled back, discarding %d event(s)", len(self._events))
        self._events = []

    @staticmethod
    def _publish(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info("Publishing %d domain events after commit", len(events))
        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The data is already committed; subscribers are best-effort.
            logger.error("Error publishing events: %s", e, exc_info=True)
