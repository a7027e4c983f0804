from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class SlotOpened(DomainEvent):
    slot_id: int


@dataclass
class OpenSlot:
    slot_id: int


@pytest.fixture
def bus():
    bus = MessageBus()
    yield bus
    bus.clear()


def test_command_goes_to_its_handler(bus):
    bus.register_command_handler(OpenSlot, lambda command: command.slot_id * 2)

    assert bus.handle_command(OpenSlot(slot_id=21)) == 42


def test_one_handler_per_command(bus):
    bus.register_command_handler(OpenSlot, lambda command: 1)

    with pytest.raises(ValueError):
        bus.register_command_handler(OpenSlot, lambda command: 2)

    bus.register_command_handler(OpenSlot, lambda command: 3, replace=True)
    assert bus.handle_command(OpenSlot(slot_id=1)) == 3


def test_unhandled_command(bus):
    with pytest.raises(LookupError):
        bus.handle_command(OpenSlot(slot_id=1))


def test_failing_event_handler_does_not_stop_others(bus):
    received = []

    def failing(event):
        received.append("failing")
        raise RuntimeError("down")

    bus.register_event_handler(SlotOpened, failing)
    bus.register_event_handler(SlotOpened, received.append)
    bus.register_event_handler(SlotOpened, received.append)

    event = SlotOpened(slot_id=5)
    bus.publish_events([event])

    assert received == ["failing", event]
    assert event.name == "SlotOpened"


def test_clear_forgets_handlers(bus):
    bus.register_command_handler(OpenSlot, lambda command: 1)
    bus.clear()

    with pytest.raises(LookupError):
        bus.handle_command(OpenSlot(slot_id=1))
