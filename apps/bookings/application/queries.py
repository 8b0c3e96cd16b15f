"""
Booking Queries

Read side of the booking domain: the slot availability index, the
calendar projection and the public booking lookup. Reads never take
locks and retry transient store failures a bounded number of times.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional
import logging

from django.db.models import Prefetch
from django.utils import timezone

from apps.bookings.domain.availability import SlotView, project_day
from apps.bookings.domain.calendar import CalendarEvent, build_event
from apps.bookings.domain.lifecycle import BookingStatus, parse_status
from apps.bookings.models import Booking, BookingSlot
from shared.domain.exceptions import ValidationError
from shared.infrastructure.store import retry_read, translate_store_errors

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_DAYS = 30
LOOKUP_LIMIT = 20


class SlotAvailabilityIndex:
    """24-slot day view derived from current bookings."""

    def __init__(self, settings_store):
        self.settings_store = settings_store

    @retry_read
    def slots_for(self, slot_date: date, now: Optional[datetime] = None) -> List[SlotView]:
        now = timezone.localtime(now) if now else timezone.localtime()
        occupancy = dict(
            BookingSlot.objects.filter(slot_date=slot_date, is_active=True)
            .exclude(booking__status=Booking.Status.CANCELLED)
            .values_list("slot_hour", "booking__status")
        )
        return project_day(slot_date, occupancy, self.settings_store.schedule(), now)

    def public_slots_for(self, slot_date: date, now: Optional[datetime] = None) -> List[SlotView]:
        """Slots for the public booking page, which never shows past dates."""
        today = timezone.localtime(now).date() if now else timezone.localdate()
        if slot_date < today:
            raise ValidationError("Date cannot be in the past.", field="date")
        return self.slots_for(slot_date, now=now)


class CalendarEvents:
    """
    Restartable, lazy sequence of CalendarEvent.

    Nothing is read until iteration starts and every iteration runs the
    query again, so a long-lived instance always reflects current state.
    """

    def __init__(self, queryset):
        self._queryset = queryset

    def __iter__(self) -> Iterator[CalendarEvent]:
        tz = timezone.get_current_timezone()
        with translate_store_errors():
            for booking in self._queryset.all().iterator(chunk_size=200):
                slots = list(booking.slots.all())
                if not slots:
                    logger.warning(f"Booking {booking.pk} has no slots, skipped in calendar")
                    continue
                yield build_event(booking, slots, tz)


@dataclass(frozen=True)
class CalendarWindow:
    start: date
    end: date
    status: Optional[BookingStatus] = None

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "status": str(self.status) if self.status else None,
        }


class CalendarProjector:

    def window(self, start: Optional[date] = None, end: Optional[date] = None, status=None) -> CalendarWindow:
        today = timezone.localdate()
        start = start or today
        end = end or today + timedelta(days=DEFAULT_CALENDAR_DAYS)
        if end < start:
            raise ValidationError("End date must not be before start date.", field="end")
        return CalendarWindow(start=start, end=end, status=parse_status(status) if status else None)

    def events_for(self, start: Optional[date] = None, end: Optional[date] = None, status=None) -> CalendarEvents:
        """
        Calendar events for bookings dated within ``[start, end]``.

        Cancelled bookings are left out unless ``status="cancelled"`` is
        requested explicitly.
        """
        window = self.window(start, end, status)
        queryset = (
            Booking.objects.filter(booking_date__gte=window.start, booking_date__lte=window.end)
            .select_related("customer")
            .prefetch_related(Prefetch("slots", queryset=BookingSlot.objects.order_by("slot_hour")))
            .order_by("booking_date", "created_at")
        )
        if window.status is not None:
            queryset = queryset.filter(status=window.status.value)
        else:
            queryset = queryset.exclude(status=Booking.Status.CANCELLED)
        return CalendarEvents(queryset)


@retry_read
def lookup_bookings(phone: str) -> List[Booking]:
    """Public status check: a customer's recent bookings by phone number."""
    phone = (phone or "").strip()
    if len(phone) < 4:
        raise ValidationError("Enter the phone number used for the booking.", field="phone")
    return list(
        Booking.objects.filter(customer__phone=phone)
        .select_related("customer")
        .prefetch_related("slots")
        .order_by("-created_at")[:LOOKUP_LIMIT]
    )
