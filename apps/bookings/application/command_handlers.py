"""
Booking Command Handlers

These are the use cases of the booking lifecycle. They orchestrate the slot
allocator and the booking store and publish domain events after commit.

Commands:
- CreateBookingCommand: Reserve a slot and record a pending booking
- ConfirmBookingCommand: pending -> confirmed
- CancelBookingCommand: pending/confirmed -> cancelled, frees the slot
- DeleteBookingCommand: Remove a booking, freeing the slot if it still holds it
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
import re

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.core.validators import validate_email  # type: ignore
from django.db import IntegrityError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain import state_machine
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingConfirmed,
    BookingCreated,
    BookingDeleted,
)
from apps.bookings.domain.ownership import ensure_owner
from apps.bookings.domain.state_machine import Operation, plan_transition
from apps.bookings.exceptions import (
    BookingNotFound,
    BookingValidationError,
    Conflict,
    SlotNotFound,
)
from apps.bookings.models import Booking, default_currency
from apps.slots.allocator import SlotAllocator, slot_allocator
from apps.slots.models import Slot, normalize_handle
from shared.application.uow import DjangoUnitOfWork
from shared.infrastructure.database import lock_if_possible, storage_guard

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^\+?[0-9 ()\-]{7,20}$")


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to reserve a slot for a customer

    ``slot_id`` may be None for walk-ins; no slot is claimed then.
    """
    handle: str
    slot_id: int | None
    customer_name: str
    customer_email: str
    customer_phone: str = ''
    item_title: str = ''
    amount: Decimal | None = None
    currency: str | None = None
    payment_session_id: str | None = None


@dataclass
class ConfirmBookingCommand:
    booking_id: int
    handle: str | None = None


@dataclass
class CancelBookingCommand:
    booking_id: int
    handle: str | None = None


@dataclass
class DeleteBookingCommand:
    booking_id: int
    handle: str | None = None


# ===== Helpers =====

def validate_customer_fields(command: CreateBookingCommand) -> dict[str, str]:
    """Return field errors for a create request; empty when valid."""

    errors: dict[str, str] = {}
    if not normalize_handle(command.handle):
        errors["handle"] = "Handle is required."
    if not (command.customer_name or "").strip():
        errors["customer_name"] = "Customer name is required."

    email = (command.customer_email or "").strip()
    if not email:
        errors["customer_email"] = "Customer email is required."
    else:
        try:
            validate_email(email)
        except DjangoValidationError:
            errors["customer_email"] = "Enter a valid email address."

    phone = (command.customer_phone or "").strip()
    if phone and not PHONE_RE.match(phone):
        errors["customer_phone"] = "Enter a valid phone number."

    if command.amount is not None:
        try:
            if Decimal(command.amount) < 0:
                errors["amount"] = "Amount cannot be negative."
        except (InvalidOperation, TypeError, ValueError):
            errors["amount"] = "Enter a valid amount."

    currency = command.currency
    if currency is not None and not (len(currency) == 3 and currency.isalpha()):
        errors["currency"] = "Use a three-letter currency code."
    return errors


def load_booking(booking_id: int, *, lock: bool = False) -> Booking:
    queryset = Booking.objects.select_related("slot").filter(pk=booking_id)
    if lock:
        queryset = lock_if_possible(queryset)
    booking = queryset.first()
    if booking is None:
        raise BookingNotFound(booking_id=booking_id)
    return booking


def _reload_status(booking: Booking) -> str:
    status = Booking.objects.filter(pk=booking.pk).values_list("status", flat=True).first()
    if status is None:
        raise BookingNotFound(booking_id=booking.pk)
    return status


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    The slot claim and the booking row are two writes with no transaction
    spanning them:

    1. Validate input, load the slot, check ownership (no writes yet)
    2. allocator.reserve(slot) - atomic conditional update, commits alone
    3. Insert the booking inside a unit of work
    4. If step 3 fails, release the slot and re-raise the original error

    Between 2 and 3 the slot is claimed with no booking row. If the process
    dies inside that window the compensating release never runs; the
    ``bookings.release_stranded_slots`` task frees such slots later.
    """

    def __init__(self, allocator: SlotAllocator | None = None):
        self.allocator = allocator or slot_allocator

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Returns: the new pending Booking

        Raises:
            BookingValidationError, SlotNotFound, OwnershipMismatch,
            SlotConflict, Conflict, DependencyFailure
        """
        errors = validate_customer_fields(command)
        if errors:
            raise BookingValidationError(errors=errors)

        plan_transition(None, Operation.CREATE)
        handle = normalize_handle(command.handle)

        slot = None
        if command.slot_id is not None:
            with storage_guard("slot lookup"):
                slot = Slot.objects.filter(pk=command.slot_id).first()
            if slot is None:
                raise SlotNotFound(slot_id=command.slot_id)
            ensure_owner(slot=slot, handle=handle)
            self.allocator.reserve(slot.pk)

        try:
            booking = self._write_booking(command, handle, slot)
        except Exception as exc:
            if slot is not None:
                self._release_after_failed_write(slot.pk, exc)
            if isinstance(exc, IntegrityError):
                raise Conflict("Booking could not be recorded.", slot_id=command.slot_id) from exc
            raise

        logger.info(
            "Booking %s created for @%s slot %s",
            booking.pk, booking.handle, booking.slot_id,
        )
        return booking

    def _write_booking(self, command: CreateBookingCommand, handle: str, slot: Slot | None) -> Booking:
        with DjangoUnitOfWork() as uow, storage_guard("booking write"):
            booking = Booking.objects.create(
                handle=handle,
                slot=slot,
                team_member_id=slot.team_member_id if slot else None,
                team_member_name=slot.team_member_name if slot else "",
                customer_name=command.customer_name.strip(),
                customer_email=command.customer_email.strip(),
                customer_phone=(command.customer_phone or "").strip(),
                item_title=(command.item_title or "").strip(),
                amount=command.amount,
                currency=(command.currency or default_currency()).lower(),
                payment_session_id=command.payment_session_id or None,
                status=Booking.Status.PENDING,
            )
            uow.record(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                handle=booking.handle,
                slot_id=booking.slot_id,
            ))
        return booking

    def _release_after_failed_write(self, slot_id: int, cause: Exception) -> None:
        logger.warning(
            "Booking write failed after reserving slot %s (%s); releasing slot",
            slot_id, cause,
        )
        try:
            self.allocator.release(slot_id)
        except Exception:
            # The original write error is what the caller needs to see.
            logger.error("Compensating release of slot %s failed", slot_id, exc_info=True)


class ConfirmBookingHandler:
    """Handler for confirming a pending booking. Confirming twice is a no-op."""

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow, storage_guard("booking confirm"):
            booking = load_booking(command.booking_id, lock=True)
            ensure_owner(booking=booking, slot=booking.slot, handle=command.handle)

            transition = plan_transition(booking.status, Operation.CONFIRM)
            if transition.changes_status:
                now = timezone.now()
                updated = Booking.objects.filter(
                    pk=booking.pk,
                    status=state_machine.PENDING,
                ).update(status=state_machine.CONFIRMED, confirmed_at=now, updated_at=now)

                if updated:
                    uow.record(BookingConfirmed(
                        aggregate_id=booking.pk,
                        booking_id=booking.pk,
                        handle=booking.handle,
                    ))
                else:
                    # Lost a race; re-plan against the status that won.
                    plan_transition(_reload_status(booking), Operation.CONFIRM)

            booking.refresh_from_db()

        logger.info("Booking %s confirmed", booking.pk)
        return booking


class CancelBookingHandler:
    """
    Handler for cancelling a booking

    The pending/confirmed -> cancelled update is conditional on the current
    status, so when cancel and delete race only one of them changes the row
    and only that one releases the slot.
    """

    def __init__(self, allocator: SlotAllocator | None = None):
        self.allocator = allocator or slot_allocator

    def handle(self, command: CancelBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow, storage_guard("booking cancel"):
            booking = load_booking(command.booking_id)
            ensure_owner(booking=booking, slot=booking.slot, handle=command.handle)
            old_status = booking.status
            plan_transition(old_status, Operation.CANCEL)

            if not claim_release(booking):
                plan_transition(_reload_status(booking), Operation.CANCEL)

            release_slot(self.allocator, booking)
            uow.record(BookingCancelled(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                handle=booking.handle,
                slot_id=booking.slot_id,
                old_status=old_status,
            ))
            booking.refresh_from_db()

        logger.info("Booking %s cancelled (was %s)", booking.pk, old_status)
        return booking


class DeleteBookingHandler:
    """
    Handler for hard-deleting a booking

    Allowed from any status. An active booking is first moved to cancelled
    with the same conditional update cancel uses; whoever wins that update
    releases the slot. A booking that was already cancelled is removed
    without touching the slot.
    """

    def __init__(self, allocator: SlotAllocator | None = None):
        self.allocator = allocator or slot_allocator

    def handle(self, command: DeleteBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow, storage_guard("booking delete"):
            booking = load_booking(command.booking_id)
            ensure_owner(booking=booking, slot=booking.slot, handle=command.handle)
            plan_transition(booking.status, Operation.DELETE)

            released = claim_release(booking)
            if released:
                release_slot(self.allocator, booking)

            deleted, _ = Booking.objects.filter(pk=booking.pk).delete()
            if not deleted:
                raise BookingNotFound(booking_id=booking.pk)

            uow.record(BookingDeleted(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                handle=booking.handle,
                slot_id=booking.slot_id,
                released_slot=released,
            ))

        logger.info("Booking %s deleted (slot released: %s)", booking.pk, released)
        return booking


def claim_release(booking: Booking) -> bool:
    """
    Move an active booking to cancelled. True only for the caller whose
    update changed the row; that caller owns the slot release.
    """
    now = timezone.now()
    won = Booking.objects.filter(
        pk=booking.pk,
        status__in=state_machine.ACTIVE_STATUSES,
    ).update(status=state_machine.CANCELLED, cancelled_at=now, updated_at=now)
    if won:
        booking.status = state_machine.CANCELLED
        booking.cancelled_at = now
    return bool(won)


def release_slot(allocator: SlotAllocator, booking: Booking) -> None:
    if booking.slot_id is None:
        return
    try:
        allocator.release(booking.slot_id)
    except SlotNotFound:
        logger.warning("Slot %s of booking %s no longer exists", booking.slot_id, booking.pk)
