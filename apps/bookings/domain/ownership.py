"""
Ownership predicate

A slot and every booking on it belong to the provider whose handle they
carry. Mutating operations call ``ensure_owner`` explicitly instead of
relying on query scoping, so an access path that forgets to filter by
handle still cannot touch another provider's data.
"""

from apps.slots.models import normalize_handle
from shared.domain.exceptions import OwnershipMismatch


def handles_match(left: str | None, right: str | None) -> bool:
    left, right = normalize_handle(left), normalize_handle(right)
    return bool(left) and left == right


def ensure_owner(*, booking=None, slot=None, handle: str | None = None) -> None:
    """
    Check that every handle involved in an operation is the same provider.

    ``handle`` is the caller's provider handle; pass None when the caller
    is the public booking page acting on a booking it created. The booking
    and slot handles are always compared with each other.

    Raises:
        OwnershipMismatch
    """
    if booking is not None and handle is not None and not handles_match(handle, booking.handle):
        raise OwnershipMismatch(booking_id=booking.pk)

    if slot is not None:
        owner = booking.handle if booking is not None else handle
        if owner is not None and not handles_match(owner, slot.creator_handle):
            raise OwnershipMismatch(
                slot_id=slot.pk,
                booking_id=getattr(booking, "pk", None),
            )
