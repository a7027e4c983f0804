"""
Slot Allocator

Atomic reserve/release over the slot store. This is the only code that
writes ``Slot.is_available``.

Every mutation is a single conditional UPDATE evaluated by the database:

    UPDATE slots_slot SET is_available = false, claimed_at = now
     WHERE id = %s AND is_available = true

Concurrent reservations of the same slot are serialized by the row lock the
UPDATE takes, so exactly one caller sees one affected row and everyone else
sees zero. There is no read-then-write in application code and no retry:
losing the race is reported as SlotConflict.
"""

from __future__ import annotations

from datetime import datetime
import logging

from django.db.models import Exists, OuterRef  # type: ignore
from django.utils import timezone  # type: ignore

from shared.infrastructure.database import storage_guard

from .exceptions import SlotConflict, SlotNotFound
from .models import Slot

logger = logging.getLogger(__name__)


class SlotAllocator:
    """Reserve, release and inspect slot availability."""

    def reserve(self, slot_id: int) -> None:
        """
        Claim a free slot.

        Raises:
            SlotConflict: the slot is already claimed
            SlotNotFound: no slot with this id
        """
        with storage_guard("slot reserve"):
            claimed = Slot.objects.filter(pk=slot_id, is_available=True).update(
                is_available=False,
                claimed_at=timezone.now(),
            )
            if claimed:
                logger.info("Slot %s reserved", slot_id)
                return
            exists = Slot.objects.filter(pk=slot_id).exists()

        if not exists:
            raise SlotNotFound(slot_id=slot_id)
        logger.info("Slot %s reserve lost: already claimed", slot_id)
        raise SlotConflict(slot_id=slot_id)

    def release(self, slot_id: int) -> None:
        """
        Mark a slot free. Releasing an already free slot is a no-op.

        Raises:
            SlotNotFound: no slot with this id
        """
        with storage_guard("slot release"):
            matched = Slot.objects.filter(pk=slot_id).update(
                is_available=True,
                claimed_at=None,
            )
        if not matched:
            raise SlotNotFound(slot_id=slot_id)
        logger.info("Slot %s released", slot_id)

    def is_free(self, slot_id: int) -> bool:
        """Advisory availability; may be stale as soon as it is returned."""

        with storage_guard("slot lookup"):
            value = Slot.objects.filter(pk=slot_id).values_list("is_available", flat=True).first()
        if value is None:
            raise SlotNotFound(slot_id=slot_id)
        return value

    def release_stranded(self, claimed_before: datetime) -> int:
        """
        Free slots that were claimed before ``claimed_before`` but are not
        held by any pending or confirmed booking.

        A slot ends up in this state only when a process dies between
        ``reserve`` and the booking write, before the compensating release
        runs. Returns the number of slots freed.
        """
        from apps.bookings.models import Booking  # local import to avoid circular

        holders = Booking.objects.active().filter(slot_id=OuterRef("pk"))
        with storage_guard("stranded slot sweep"):
            freed = (
                Slot.objects.filter(~Exists(holders), is_available=False, claimed_at__lt=claimed_before)
                .update(is_available=True, claimed_at=None)
            )
        if freed:
            logger.warning("Released %d stranded slot(s) claimed before %s", freed, claimed_before)
        return freed


slot_allocator = SlotAllocator()
