from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.notifications import BookingNotice, MemoryNotifier, get_notifier
from apps.bookings.tasks import deliver_booking_notification, release_stranded_slots
from apps.slots.models import Slot


@pytest.fixture(autouse=True)
def outbox():
    notifier = get_notifier()
    assert isinstance(notifier, MemoryNotifier)
    notifier.sent.clear()
    yield notifier.sent
    notifier.sent.clear()


@pytest.fixture
def booking(db):
    start = timezone.now() + timedelta(days=1)
    slot = Slot.objects.create(creator_handle="alice", start_time=start, end_time=start + timedelta(hours=1))
    return Booking.objects.create(
        handle="alice",
        slot=slot,
        customer_name="Bob",
        customer_email="bob@example.com",
        amount="12.50",
        currency="eur",
    )


@pytest.mark.django_db
def test_deliver_notification(booking, outbox):
    assert deliver_booking_notification(booking.pk, "confirmed") is True

    notice = outbox[0]
    assert notice.kind == "confirmed"
    assert notice.customer_email == "bob@example.com"
    assert notice.price == "12.50 EUR"
    assert notice.as_dict()["booking_id"] == booking.pk


@pytest.mark.django_db
def test_deliver_notification_for_missing_booking(outbox):
    assert deliver_booking_notification(4242, "created") is False
    assert outbox == []


@pytest.mark.django_db
def test_delivery_failure_does_not_raise(booking):
    notifier = mock.Mock()
    notifier.notify.side_effect = RuntimeError("sms gateway down")

    with mock.patch("apps.bookings.tasks.get_notifier", return_value=notifier):
        assert deliver_booking_notification(booking.pk, "created") is False


@pytest.mark.django_db
def test_logging_notifier_is_the_default(booking, settings, outbox):
    del settings.BOOKING_NOTIFIER

    with mock.patch("apps.bookings.notifications.logger") as logger:
        assert deliver_booking_notification(booking.pk, "created") is True

    assert outbox == []
    assert logger.info.call_args.args[-1] == "bob@example.com"


def test_notice_for_walk_in():
    walk_in = Booking(pk=7, handle="alice", customer_name="Bob", customer_email="bob@example.com", status="pending")

    notice = BookingNotice.from_booking("created", walk_in)

    assert notice.start_time is None
    assert notice.price is None


@pytest.mark.django_db
def test_release_stranded_slots_task(settings):
    settings.BOOKING_STRANDED_SLOT_GRACE_MINUTES = 5
    start = timezone.now() + timedelta(days=1)
    old = Slot.objects.create(
        creator_handle="alice",
        start_time=start,
        end_time=start + timedelta(hours=1),
        is_available=False,
        claimed_at=timezone.now() - timedelta(minutes=6),
    )
    fresh = Slot.objects.create(
        creator_handle="alice",
        start_time=start + timedelta(hours=1),
        end_time=start + timedelta(hours=2),
        is_available=False,
        claimed_at=timezone.now() - timedelta(minutes=1),
    )

    assert release_stranded_slots() == {"released": 1}

    old.refresh_from_db()
    fresh.refresh_from_db()
    assert old.is_available
    assert not fresh.is_available


def test_memory_notifiers_keep_separate_outboxes(outbox):
    first, second = MemoryNotifier(), MemoryNotifier()
    first.notify(BookingNotice.from_booking("created", Booking(pk=1, handle="alice", customer_name="Bob")))

    assert len(first.sent) == 1
    assert second.sent == []
    assert outbox == []
    assert get_notifier() is get_notifier()
