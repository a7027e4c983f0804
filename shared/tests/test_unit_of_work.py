from dataclasses import dataclass

import pytest
from django.db import OperationalError

from shared.application.message_bus import message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent
from shared.domain.exceptions import DependencyFailure
from shared.infrastructure.database import storage_guard


@dataclass(kw_only=True)
class ProbeRecorded(DomainEvent):
    label: str


published = []
message_bus.register_event_handler(ProbeRecorded, published.append)


@pytest.fixture(autouse=True)
def reset_published():
    published.clear()


@pytest.mark.django_db
def test_events_are_published_after_commit(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        with DjangoUnitOfWork() as uow:
            uow.record(ProbeRecorded(label="first"))
            assert [e.label for e in uow.pending_events] == ["first"]
            assert published == []

    assert [e.label for e in published] == ["first"]


@pytest.mark.django_db
def test_rollback_discards_events(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError):
            with DjangoUnitOfWork() as uow:
                uow.record(ProbeRecorded(label="lost"))
                raise RuntimeError("write failed")

    assert callbacks == []
    assert published == []


def test_storage_guard_translates_connection_errors():
    with pytest.raises(DependencyFailure) as exc_info:
        with storage_guard("probe"):
            raise OperationalError("server closed the connection")

    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_storage_guard_lets_other_errors_through():
    with pytest.raises(KeyError):
        with storage_guard("probe"):
            raise KeyError("slot")
