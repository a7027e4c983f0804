"""Errors raised by the slot store and allocator."""

from __future__ import annotations

from shared.domain.exceptions import Conflict, NotFound


class SlotNotFound(NotFound):
    code = "slot_not_found"
    default_message = "Slot not found."


class SlotConflict(Conflict):
    """The slot was claimed by someone else first."""

    code = "slot_taken"
    default_message = "This slot was just taken. Please pick another time."


class SlotInUse(Conflict):
    """The slot is still held by a pending or confirmed booking."""

    code = "slot_in_use"
    default_message = "Slot is referenced by an active booking."
