"""
Unit of Work

One booking change = one database transaction. Domain events recorded
during the transaction reach the message bus only once it has committed;
a rollback discards them.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent
from shared.domain.exceptions import StoreUnavailable
from shared.infrastructure.store import STORE_ERRORS

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    ``transaction.atomic()`` plus an outbox of events

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = ...            # read, check version, mutate, save
            uow.add_event(BookingApproved(...))
        # committed; events handed to message_bus via on_commit

    Driver failures (lock or statement timeout, dropped connection) while
    opening, running or committing the block surface as StoreUnavailable.
    Nested use becomes a savepoint, as with ``atomic()`` itself.
    """

    def __init__(self, using=None):
        self._atomic = transaction.atomic(using=using)
        self._using = using
        self._events: List[DomainEvent] = []

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def __enter__(self):
        try:
            self._atomic.__enter__()
        except STORE_ERRORS as exc:
            logger.error(f"Could not open transaction: {exc}")
            raise StoreUnavailable() from exc
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        events, self._events = self._events, []
        if exc_type is None and events:
            transaction.on_commit(lambda: self._publish(events), using=self._using)
        elif events:
            logger.warning(f"Transaction rolled back, dropping {len(events)} event(s)")

        try:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
        except STORE_ERRORS as exc:
            logger.error(f"Commit failed: {exc}")
            raise StoreUnavailable() from exc

        if exc_type is not None and issubclass(exc_type, STORE_ERRORS):
            raise StoreUnavailable() from exc_val
        return False

    @staticmethod
    def _publish(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} event(s) after commit")
        message_bus.publish_events(events)
