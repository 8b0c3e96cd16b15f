"""
Booking Lifecycle

Status state machine for a ground booking:
- PENDING -> APPROVED (admin accepted the advance payment)
- PENDING -> CANCELLED (rejected, or hold expired)
- APPROVED -> COMPLETED (game played)
- APPROVED -> CANCELLED (rejected after approval)

COMPLETED and CANCELLED are terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet

from shared.domain.exceptions import InvalidTransition, ValidationError


class BookingStatus(str, Enum):
    PENDING = 'pending'        # Waiting for admin approval, slots held
    APPROVED = 'approved'      # Confirmed, slots booked
    COMPLETED = 'completed'    # Played
    CANCELLED = 'cancelled'    # Rejected or expired, slots released

    def __str__(self) -> str:
        return self.value


ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.CANCELLED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def parse_status(value) -> BookingStatus:
    """Coerce a stored or user supplied value into a BookingStatus."""
    try:
        return BookingStatus(str(value))
    except ValueError:
        raise ValidationError(f"Unknown booking status '{value}'.", field="status")


def can_transition(current, target) -> bool:
    return BookingStatus(target) in ALLOWED_TRANSITIONS[BookingStatus(current)]


def ensure_transition(current, target) -> None:
    """Raise InvalidTransition unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidTransition(str(BookingStatus(current)), str(BookingStatus(target)))


def is_terminal(status) -> bool:
    return not ALLOWED_TRANSITIONS[BookingStatus(status)]


def occupies_slots(status) -> bool:
    """Pending, approved and completed bookings hold their hours."""
    return BookingStatus(status) is not BookingStatus.CANCELLED


def accepts_ledger_entries(status) -> bool:
    """Payments and extra charges are refused once a booking is cancelled."""
    return BookingStatus(status) is not BookingStatus.CANCELLED
