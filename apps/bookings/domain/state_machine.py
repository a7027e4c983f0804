"""
Booking Status Machine

States: pending, confirmed, cancelled, plus the implicit "removed" reached
through delete (not a stored status).

    (none)             --create-->  pending      reserve slot first
    pending            --confirm--> confirmed
    confirmed          --confirm--> confirmed    no-op
    pending/confirmed  --cancel-->  cancelled    release slot
    pending/confirmed  --delete-->  removed      release slot
    cancelled          --delete-->  removed      slot already free
    cancelled          --confirm/cancel-->       rejected

This module is pure: it decides what a transition does, the command
handlers carry it out.
"""

from dataclasses import dataclass
from enum import Enum

from shared.domain.exceptions import InvalidTransition

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

STATUSES = (PENDING, CONFIRMED, CANCELLED)
ACTIVE_STATUSES = (PENDING, CONFIRMED)


class Operation(Enum):
    CREATE = "create"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    DELETE = "delete"


@dataclass(frozen=True)
class Transition:
    """Outcome of applying an operation to a booking in a given status."""
    operation: Operation
    source: str | None
    target: str | None  # None means the booking row is removed
    reserves_slot: bool = False
    releases_slot: bool = False

    @property
    def changes_status(self) -> bool:
        return self.source != self.target

    @property
    def removes_booking(self) -> bool:
        return self.target is None and self.operation is Operation.DELETE


TRANSITIONS = {
    (None, Operation.CREATE): Transition(Operation.CREATE, None, PENDING, reserves_slot=True),
    (PENDING, Operation.CONFIRM): Transition(Operation.CONFIRM, PENDING, CONFIRMED),
    (CONFIRMED, Operation.CONFIRM): Transition(Operation.CONFIRM, CONFIRMED, CONFIRMED),
    (PENDING, Operation.CANCEL): Transition(Operation.CANCEL, PENDING, CANCELLED, releases_slot=True),
    (CONFIRMED, Operation.CANCEL): Transition(Operation.CANCEL, CONFIRMED, CANCELLED, releases_slot=True),
    (PENDING, Operation.DELETE): Transition(Operation.DELETE, PENDING, None, releases_slot=True),
    (CONFIRMED, Operation.DELETE): Transition(Operation.DELETE, CONFIRMED, None, releases_slot=True),
    (CANCELLED, Operation.DELETE): Transition(Operation.DELETE, CANCELLED, None),
}


def _status(value):
    # Accepts plain strings as well as enum members such as Booking.Status.
    return getattr(value, "value", value)


def plan_transition(source, operation: Operation) -> Transition:
    """
    Look up the transition for ``operation`` from ``source``.

    ``source`` is None for a booking that does not exist yet.

    Raises:
        InvalidTransition: the operation is not allowed from ``source``
    """
    source = _status(source)
    if source is not None and source not in STATUSES:
        raise ValueError(f"Unknown booking status: {source!r}")

    transition = TRANSITIONS.get((source, operation))
    if transition is None:
        raise InvalidTransition(
            f"Cannot {operation.value} a booking that is {source or 'not created'}.",
            status=source,
            operation=operation.value,
        )
    return transition


def is_active(status) -> bool:
    """Active bookings hold an exclusive claim on their slot."""
    return _status(status) in ACTIVE_STATUSES
