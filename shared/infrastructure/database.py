"""
Database helpers shared by the domain apps.

Translates driver-level failures into the domain's DependencyFailure and
provides the conditional-lock helper used by the booking handlers.
"""

from contextlib import contextmanager
import logging

from django.db import InterfaceError, OperationalError, transaction
from django.db.utils import NotSupportedError

from shared.domain.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


@contextmanager
def storage_guard(operation: str):
    """
    Re-raise connection-level database errors as DependencyFailure.

    Integrity errors are not caught here: they carry business meaning
    (e.g. a uniqueness violation) and are translated by the caller.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("Storage failure during %s: %s", operation, exc, exc_info=True)
        raise DependencyFailure(f"Storage unavailable during {operation}.") from exc


def lock_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
