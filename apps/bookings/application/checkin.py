"""
Checkin Gate

Records a customer's arrival against a confirmed booking. Only writes the
``checked_in``/``checked_in_at`` fields; slot availability is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import hmac
import logging

from django.utils import timezone  # type: ignore

from apps.bookings.domain import state_machine
from apps.bookings.domain.events import BookingCheckedIn
from apps.bookings.domain.ownership import ensure_owner
from apps.bookings.models import Booking
from shared.application.uow import DjangoUnitOfWork
from shared.infrastructure.database import storage_guard

from .command_handlers import load_booking

logger = logging.getLogger(__name__)


class CheckinOutcome(Enum):
    CHECKED_IN = "checked_in"
    ALREADY_CHECKED_IN = "already_checked_in"
    NOT_CONFIRMED = "not_confirmed"
    CANCELLED = "cancelled"
    INVALID_CODE = "invalid_code"


@dataclass(frozen=True)
class CheckinResult:
    outcome: CheckinOutcome
    booking: Booking

    @property
    def ok(self) -> bool:
        """True when the customer is checked in, now or earlier."""
        return self.outcome in (CheckinOutcome.CHECKED_IN, CheckinOutcome.ALREADY_CHECKED_IN)

    @property
    def already_done(self) -> bool:
        return self.outcome is CheckinOutcome.ALREADY_CHECKED_IN


@dataclass
class CheckInBookingCommand:
    """``code`` is the booking's check-in code, e.g. scanned from a QR code."""
    booking_id: int
    handle: str | None = None
    code: str | None = None


class CheckInBookingHandler:
    """
    Handler for checking in a customer

    The write is a conditional update on ``status = confirmed AND NOT
    checked_in`` so that concurrent scans record a single timestamp.
    """

    def handle(self, command: CheckInBookingCommand) -> CheckinResult:
        """
        Raises:
            BookingNotFound, OwnershipMismatch, DependencyFailure
        """
        with DjangoUnitOfWork() as uow, storage_guard("booking checkin"):
            booking = load_booking(command.booking_id)
            ensure_owner(booking=booking, slot=booking.slot, handle=command.handle)

            if command.code is not None and not hmac.compare_digest(
                command.code.strip().upper().encode(), booking.checkin_code.encode()
            ):
                return self._reject(booking, CheckinOutcome.INVALID_CODE)

            updated = Booking.objects.filter(
                pk=booking.pk,
                status=state_machine.CONFIRMED,
                checked_in=False,
            ).update(checked_in=True, checked_in_at=timezone.now(), updated_at=timezone.now())

            booking.refresh_from_db()
            if updated:
                uow.record(BookingCheckedIn(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    handle=booking.handle,
                ))
                logger.info("Booking %s checked in", booking.pk)
                return CheckinResult(CheckinOutcome.CHECKED_IN, booking)

        return self._classify(booking)

    def _classify(self, booking: Booking) -> CheckinResult:
        if booking.status == state_machine.CANCELLED:
            return self._reject(booking, CheckinOutcome.CANCELLED)
        if booking.checked_in:
            return CheckinResult(CheckinOutcome.ALREADY_CHECKED_IN, booking)
        return self._reject(booking, CheckinOutcome.NOT_CONFIRMED)

    def _reject(self, booking: Booking, outcome: CheckinOutcome) -> CheckinResult:
        logger.info("Checkin of booking %s rejected: %s", booking.pk, outcome.value)
        return CheckinResult(outcome, booking)
