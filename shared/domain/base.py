"""
Base Domain Classes

Building blocks shared by the domain layer:
- ValueObject: Immutable objects compared by value
- Aggregate: Consistency boundary that records domain events
- DomainEvent: Something that happened, published after commit
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Concrete events add their payload as extra dataclass fields
    (declared with defaults, since the base fields have defaults).
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the event envelope plus its payload fields"""
        data: Dict[str, Any] = {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id or None,
        }
        for name, value in vars(self).items():
            if name in ('event_id', 'occurred_at', 'aggregate_id'):
                continue
            data[name] = value.isoformat() if hasattr(value, 'isoformat') else value
        return data


class Aggregate(ABC):
    """
    Base class for aggregate roots

    Subclasses are dataclasses that declare their own ``_events`` list
    (``field(default_factory=list, init=False, repr=False, compare=False)``)
    so their own required fields can stay positional.
    """
    _events: List[DomainEvent]

    @property
    @abstractmethod
    def identity(self) -> str:
        """Stable key of the aggregate"""

    def add_event(self, event: DomainEvent) -> None:
        """Record a domain event to be published after commit"""
        if not event.aggregate_id:
            event.aggregate_id = self.identity
        self._events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Return recorded events and forget them"""
        events, self._events[:] = list(self._events), []
        return events

    @property
    def events(self) -> List[DomainEvent]:
        """Copy of the events recorded so far"""
        return list(self._events)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.identity == other.identity

    def __hash__(self):
        return hash((self.__class__.__name__, self.identity))
