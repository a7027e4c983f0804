"""Tests for the slot allocator and the slot store."""

from __future__ import annotations

import threading
from datetime import timedelta
from unittest import skipUnless

from django.db import connection
from django.test import TestCase, TransactionTestCase
from django.utils import timezone

from apps.bookings.models import Booking
from apps.slots.allocator import SlotAllocator, slot_allocator
from apps.slots.exceptions import SlotConflict, SlotInUse, SlotNotFound
from apps.slots.models import Slot, normalize_handle


def make_slot(handle: str = "alice", hours_from_now: int = 24, **extra) -> Slot:
    start = (timezone.now() + timedelta(hours=hours_from_now)).replace(microsecond=0)
    return Slot.objects.create(
        creator_handle=handle,
        start_time=start,
        end_time=start + timedelta(minutes=30),
        **extra,
    )


class SlotAllocatorTests(TestCase):
    def setUp(self) -> None:
        self.allocator = SlotAllocator()
        self.slot = make_slot()

    def test_reserve_claims_free_slot_with_single_query(self) -> None:
        with self.assertNumQueries(1):
            self.allocator.reserve(self.slot.pk)

        self.slot.refresh_from_db()
        self.assertFalse(self.slot.is_available)
        self.assertIsNotNone(self.slot.claimed_at)

    def test_second_reserve_conflicts(self) -> None:
        self.allocator.reserve(self.slot.pk)

        with self.assertRaises(SlotConflict) as ctx:
            self.allocator.reserve(self.slot.pk)

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.code, "slot_taken")

    def test_reserve_unknown_slot(self) -> None:
        with self.assertRaises(SlotNotFound):
            self.allocator.reserve(self.slot.pk + 1000)

    def test_release_is_idempotent(self) -> None:
        self.allocator.reserve(self.slot.pk)

        self.allocator.release(self.slot.pk)
        self.allocator.release(self.slot.pk)

        self.slot.refresh_from_db()
        self.assertTrue(self.slot.is_available)
        self.assertIsNone(self.slot.claimed_at)

    def test_release_unknown_slot(self) -> None:
        with self.assertRaises(SlotNotFound):
            self.allocator.release(self.slot.pk + 1000)

    def test_released_slot_can_be_reserved_again(self) -> None:
        self.allocator.reserve(self.slot.pk)
        self.allocator.release(self.slot.pk)

        self.allocator.reserve(self.slot.pk)

        self.assertFalse(self.allocator.is_free(self.slot.pk))

    def test_is_free(self) -> None:
        self.assertTrue(self.allocator.is_free(self.slot.pk))
        with self.assertRaises(SlotNotFound):
            self.allocator.is_free(self.slot.pk + 1000)


class ReleaseStrandedTests(TestCase):
    def setUp(self) -> None:
        self.now = timezone.now()
        self.long_ago = self.now - timedelta(minutes=30)

    def _claimed_slot(self, claimed_at, hours_from_now: int) -> Slot:
        return make_slot(hours_from_now=hours_from_now, is_available=False, claimed_at=claimed_at)

    def test_frees_only_old_claims_without_active_booking(self) -> None:
        stranded = self._claimed_slot(self.long_ago, 1)
        recent = self._claimed_slot(self.now, 2)
        held = self._claimed_slot(self.long_ago, 3)
        Booking.objects.create(
            handle="alice",
            slot=held,
            customer_name="Bob",
            customer_email="bob@example.com",
        )

        freed = slot_allocator.release_stranded(self.now - timedelta(minutes=10))

        self.assertEqual(freed, 1)
        stranded.refresh_from_db()
        recent.refresh_from_db()
        held.refresh_from_db()
        self.assertTrue(stranded.is_available)
        self.assertFalse(recent.is_available)
        self.assertFalse(held.is_available)

    def test_cancelled_booking_does_not_hold_slot(self) -> None:
        slot = self._claimed_slot(self.long_ago, 1)
        Booking.objects.create(
            handle="alice",
            slot=slot,
            customer_name="Bob",
            customer_email="bob@example.com",
            status=Booking.Status.CANCELLED,
        )

        self.assertEqual(slot_allocator.release_stranded(self.now), 1)


class SlotModelTests(TestCase):
    def test_handle_is_normalized_on_save(self) -> None:
        slot = make_slot(handle="  @Alice ")

        self.assertEqual(slot.creator_handle, "alice")
        self.assertEqual(Slot.objects.for_handle("@ALICE").count(), 1)

    def test_normalize_handle(self) -> None:
        self.assertEqual(normalize_handle(None), "")
        self.assertEqual(normalize_handle("@Bob"), "bob")

    def test_window(self) -> None:
        slot = make_slot()

        self.assertEqual(slot.window.duration, timedelta(minutes=30))
        self.assertTrue(slot.window.contains(slot.start_time))
        self.assertFalse(slot.window.contains(slot.end_time))

    def test_delete_refuses_slot_held_by_active_booking(self) -> None:
        slot = make_slot()
        Booking.objects.create(handle="alice", slot=slot, customer_name="Bob", customer_email="bob@example.com")

        with self.assertRaises(SlotInUse):
            slot.delete()

        self.assertTrue(Slot.objects.filter(pk=slot.pk).exists())

    def test_delete_detaches_cancelled_bookings(self) -> None:
        slot = make_slot()
        booking = Booking.objects.create(
            handle="alice",
            slot=slot,
            customer_name="Bob",
            customer_email="bob@example.com",
            status=Booking.Status.CANCELLED,
        )

        slot.delete()

        booking.refresh_from_db()
        self.assertIsNone(booking.slot_id)


@skipUnless(connection.vendor == "postgresql", "needs row-level locking across connections")
class ConcurrentReserveTests(TransactionTestCase):
    workers = 8

    def test_exactly_one_concurrent_reservation_wins(self) -> None:
        slot = make_slot()
        barrier = threading.Barrier(self.workers)
        outcomes: list[str] = []
        lock = threading.Lock()

        def attempt() -> None:
            barrier.wait()
            try:
                slot_allocator.reserve(slot.pk)
                result = "ok"
            except SlotConflict:
                result = "conflict"
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt) for _ in range(self.workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(outcomes.count("ok"), 1)
        self.assertEqual(outcomes.count("conflict"), self.workers - 1)
