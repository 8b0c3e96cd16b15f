"""
Booking Domain Events

Events that represent things that have happened to a booking.
They are collected by the unit of work and published after commit;
the notifications app subscribes to all of them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A customer submitted a booking (status PENDING)

    Triggers:
    - Admin "new booking" notification
    """
    name = "booking_created"

    booking_id: int
    booking_number: str
    booking_date: date
    hours: List[int]
    total_amount: Decimal
    advance_payment: Decimal
    customer_name: str
    customer_phone: str
    pending_expires_at: Optional[datetime] = None


@dataclass
class BookingApproved(DomainEvent):
    """Event: Admin approved a pending booking (PENDING -> APPROVED)"""
    name = "booking_approved"

    booking_id: int
    booking_number: str
    approved_at: datetime
    admin_notes: str = ""


@dataclass
class BookingRejected(DomainEvent):
    """
    Event: Admin rejected a booking (-> CANCELLED)

    The released hours are bookable again from this point.
    """
    name = "booking_rejected"

    booking_id: int
    booking_number: str
    reason: str
    released_hours: List[int] = field(default_factory=list)


@dataclass
class BookingExpired(DomainEvent):
    """Event: The pending hold ran out and the system cancelled the booking"""
    name = "booking_expired"

    booking_id: int
    booking_number: str
    released_hours: List[int] = field(default_factory=list)


@dataclass
class BookingCompleted(DomainEvent):
    """Event: The game was played (APPROVED -> COMPLETED)"""
    name = "booking_completed"

    booking_id: int
    booking_number: str
    remaining_payment: Decimal


@dataclass
class BookingHoursChanged(DomainEvent):
    """
    Event: Staff moved a booking to other hours on the same date

    The booking was repriced from the rate settings in force at the time.
    """
    name = "booking_hours_changed"

    booking_id: int
    booking_number: str
    booking_date: date
    previous_hours: List[int]
    hours: List[int]
    total_amount: Decimal
    remaining_payment: Decimal


@dataclass
class PaymentRecorded(DomainEvent):
    """Event: A payment (optionally with a discount) was added to the ledger"""
    name = "payment_recorded"

    booking_id: int
    booking_number: str
    amount: Decimal
    method: str
    discount_amount: Decimal
    remaining_payment: Decimal


@dataclass
class ExtraChargeAdded(DomainEvent):
    """Event: An extra charge increased the remaining balance"""
    name = "extra_charge_added"

    booking_id: int
    booking_number: str
    amount: Decimal
    description: str
    remaining_payment: Decimal


BOOKING_EVENTS = (
    BookingCreated,
    BookingApproved,
    BookingRejected,
    BookingExpired,
    BookingCompleted,
    BookingHoursChanged,
    PaymentRecorded,
    ExtraChargeAdded,
)
