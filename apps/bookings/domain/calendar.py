"""
Calendar Projection

Turns a booking and its hours into one calendar event. Contiguous hours
are merged into display ranges: {14, 15, 16} -> "2:00 PM – 5:00 PM",
{9, 10, 11, 15} -> "9:00 AM – 12:00 PM, 3:00 PM – 4:00 PM".
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from shared.domain.base import ValueObject
from shared.domain.value_objects import HourSet

from .availability import range_label

STATUS_COLORS = {
    "pending": "#fd7e14",
    "approved": "#40c057",
    "completed": "#228be6",
    "cancelled": "#fa5252",
}
DEFAULT_COLOR = "#868e96"


def hour_ranges(hours: Iterable[int]) -> List[str]:
    return [range_label(start, end) for start, end in HourSet.of(hours).runs()]


def format_ranges(hours: Iterable[int]) -> str:
    return ", ".join(hour_ranges(hours))


def span_for(booking_date: date, hours: HourSet, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Start of the first hour and end of the last; hour 24 is next-day midnight."""
    midnight = datetime.combine(booking_date, time(0))
    start = midnight + timedelta(hours=hours.first)
    end = midnight + timedelta(hours=hours.last + 1)
    if tz is not None:
        start = start.replace(tzinfo=tz)
        end = end.replace(tzinfo=tz)
    return start, end


@dataclass(frozen=True)
class CalendarEvent(ValueObject):
    booking_id: int
    booking_number: str
    booking_date: date
    status: str
    customer_name: str
    customer_phone: str
    hours: Tuple[int, ...]
    ranges: Tuple[str, ...]
    start: datetime
    end: datetime
    is_night_rate: bool
    total_amount: Decimal
    advance_payment: Decimal
    remaining_payment: Decimal
    pending_expires_at: Optional[datetime] = None
    customer_notes: str = ""
    admin_notes: str = ""

    @property
    def title(self) -> str:
        return f"{self.customer_name} - {format_ranges(self.hours)}"

    @property
    def color(self) -> str:
        return STATUS_COLORS.get(self.status, DEFAULT_COLOR)

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "backgroundColor": self.color,
            "borderColor": self.color,
            "extendedProps": {
                "bookingNumber": self.booking_number,
                "bookingDate": self.booking_date.isoformat(),
                "customerName": self.customer_name,
                "customerPhone": self.customer_phone,
                "status": self.status,
                "hours": list(self.hours),
                "ranges": list(self.ranges),
                "totalHours": len(self.hours),
                "totalAmount": str(self.total_amount),
                "advancePayment": str(self.advance_payment),
                "remainingPayment": str(self.remaining_payment),
                "isNightRate": self.is_night_rate,
                "pendingExpiresAt": self.pending_expires_at.isoformat() if self.pending_expires_at else None,
                "customerNotes": self.customer_notes,
                "adminNotes": self.admin_notes,
            },
        }


def build_event(booking, slots, tz: Optional[tzinfo] = None) -> CalendarEvent:
    """
    Project a booking and its slot rows into a CalendarEvent.

    ``booking`` exposes the Booking model attributes and ``customer``;
    ``slots`` are objects with ``slot_hour`` and ``is_night_rate``.
    """
    slots = list(slots)
    hours = HourSet.of(slot.slot_hour for slot in slots)
    start, end = span_for(booking.booking_date, hours, tz)
    return CalendarEvent(
        booking_id=booking.pk,
        booking_number=booking.booking_number or "",
        booking_date=booking.booking_date,
        status=str(booking.status),
        customer_name=booking.customer.name,
        customer_phone=booking.customer.phone,
        hours=tuple(hours),
        ranges=tuple(hour_ranges(hours)),
        start=start,
        end=end,
        is_night_rate=any(slot.is_night_rate for slot in slots),
        total_amount=booking.total_amount,
        advance_payment=booking.advance_payment,
        remaining_payment=booking.remaining_payment,
        pending_expires_at=booking.pending_expires_at,
        customer_notes=booking.customer_notes or "",
        admin_notes=booking.admin_notes or "",
    )
