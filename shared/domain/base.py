"""
Base Domain Classes

Foundational building blocks shared by the booking domain:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


def _serialize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Events are collected by the unit of work while a transaction is open
    and handed to the message bus once the transaction has committed.
    Subclasses add their payload as keyword-only dataclass fields.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=timezone.now, kw_only=True)

    #: Stable name used by notification consumers (e.g. ``booking_created``)
    name = "domain_event"

    def payload(self) -> dict:
        """Event-specific fields without the envelope."""
        envelope = {"event_id", "occurred_at"}
        return {
            f.name: _serialize(getattr(self, f.name))
            for f in fields(self)
            if f.name not in envelope
        }

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.name,
            'occurred_at': self.occurred_at.isoformat(),
            'payload': self.payload(),
        }
