"""
Unit of Work Pattern

Wraps one database transaction and makes sure domain events collected
inside it are published only once the transaction has committed.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from django.db import DEFAULT_DB_ALIAS, transaction

from shared.domain.base import Aggregate, DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def collect_events(self, aggregate: Aggregate):
        """Collect events from aggregate root"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Every write made inside the ``with`` block belongs to one
    ``transaction.atomic()`` block: either all of them become visible or
    none do. Events are handed to the message bus through
    ``transaction.on_commit()``.

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = repo.get(application_id, lock=True)
            booking.approve()
            repo.save(booking)
            uow.collect_events(booking)
        # Events are published after commit
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS, bus=None):
        self.using = using
        self._bus = bus
        self._events: List[DomainEvent] = []
        self._atomic: Optional[transaction.Atomic] = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            atomic, self._atomic = self._atomic, None
            if atomic is not None:
                atomic.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule publication of the collected events

        The actual database commit happens when the atomic block exits;
        on_commit callbacks are dropped by Django if it rolls back instead.
        """
        events, self._events = self._events, []
        logger.debug(f"Committing unit of work with {len(events)} events")
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        """Discard collected events"""
        if self._events:
            logger.warning(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events = []

    def collect_events(self, aggregate: Aggregate):
        new_events = aggregate.pull_events()
        if new_events:
            self._events.extend(new_events)
            logger.debug(
                f"Collected {len(new_events)} events from {aggregate.__class__.__name__} ({aggregate.identity})"
            )

    def _publish_events(self, events: List[DomainEvent]):
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        bus.publish_events(events)
