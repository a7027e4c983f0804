"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A customer reserved a slot (status pending)

    Triggers:
    - Booking received notification to the customer
    """
    booking_id: int
    handle: str
    slot_id: int | None


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Provider confirmed a booking (PENDING -> CONFIRMED)

    Triggers:
    - Booking confirmation (SMS/email) to the customer
    """
    booking_id: int
    handle: str


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled and its slot released

    Whether the customer hears about it is up to the caller; no
    notification handler is registered for this event.
    """
    booking_id: int
    handle: str
    slot_id: int | None
    old_status: str


@dataclass(kw_only=True)
class BookingDeleted(DomainEvent):
    """Event: Booking row was removed by the provider"""
    booking_id: int
    handle: str
    slot_id: int | None
    released_slot: bool


@dataclass(kw_only=True)
class BookingCheckedIn(DomainEvent):
    """Event: Customer arrived for a confirmed booking"""
    booking_id: int
    handle: str
