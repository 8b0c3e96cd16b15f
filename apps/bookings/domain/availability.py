"""
Slot Availability

Projects one day's 24 hourly slots from the hours currently held by
bookings. Nothing here is stored; the view is rebuilt on every read.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Mapping

from apps.rates.domain.rates import RateSchedule, rate_for
from shared.domain.base import ValueObject
from shared.domain.value_objects import HOURS_PER_DAY

from .lifecycle import BookingStatus, occupies_slots

RANGE_SEPARATOR = " – "


class SlotStatus(str, Enum):
    AVAILABLE = 'available'
    PENDING = 'pending'    # Held by a booking awaiting approval
    BOOKED = 'booked'      # Held by an approved or completed booking
    PAST = 'past'          # Already elapsed today

    def __str__(self) -> str:
        return self.value


def hour_label(hour: int) -> str:
    """12-hour clock label: 0 -> "12:00 AM", 14 -> "2:00 PM", 24 -> "12:00 AM"."""
    hour %= HOURS_PER_DAY
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:00 {suffix}"


def range_label(start_hour: int, end_hour: int) -> str:
    return f"{hour_label(start_hour)}{RANGE_SEPARATOR}{hour_label(end_hour)}"


@dataclass(frozen=True)
class SlotView(ValueObject):
    hour: int
    status: SlotStatus
    rate: Decimal
    is_night: bool

    @property
    def label(self) -> str:
        return range_label(self.hour, self.hour + 1)

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "label": self.label,
            "status": str(self.status),
            "rate": str(self.rate),
            "is_night": self.is_night,
        }


def elapsed_hours(slot_date: date, hours: Iterable[int], now: datetime) -> List[int]:
    """Hours of today that have already started; always empty for other dates."""
    if slot_date != now.date():
        return []
    return [hour for hour in hours if hour < now.hour]


def status_for_booking(status) -> SlotStatus:
    return SlotStatus.PENDING if BookingStatus(status) is BookingStatus.PENDING else SlotStatus.BOOKED


def project_day(
    slot_date: date,
    occupancy: Mapping[int, str],
    schedule: RateSchedule,
    now: datetime,
) -> List[SlotView]:
    """
    Build the 24 slot views for ``slot_date``.

    ``occupancy`` maps an hour to the status of the booking holding it.
    ``now`` is the ground's local time. An occupied hour keeps its
    occupancy status even after it has elapsed.
    """
    today = now.date()
    slots = []
    for hour in range(HOURS_PER_DAY):
        rate = rate_for(hour, schedule)
        holder = occupancy.get(hour)
        if holder is not None and occupies_slots(holder):
            status = status_for_booking(holder)
        elif slot_date < today or (slot_date == today and hour < now.hour):
            status = SlotStatus.PAST
        else:
            status = SlotStatus.AVAILABLE
        slots.append(SlotView(hour=hour, status=status, rate=rate.amount, is_night=rate.is_night_rate))
    return slots
