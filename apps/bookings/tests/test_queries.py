from datetime import timedelta

import pytest
from django.db import OperationalError
from django.utils import timezone

from apps.bookings.application.command_handlers import ApproveBookingCommand, RejectBookingCommand
from apps.bookings.application.queries import (
    CalendarProjector,
    SlotAvailabilityIndex,
    lookup_bookings,
)
from apps.rates.services import settings_store
from shared.application.message_bus import message_bus
from shared.domain.exceptions import StoreUnavailable, ValidationError
from shared.infrastructure.store import retry_read


@pytest.mark.django_db
def test_slots_reflect_pending_and_approved_bookings(make_booking, future_date):
    make_booking([9])
    approved = make_booking([18, 19], phone="03110000000")
    message_bus.handle_command(ApproveBookingCommand(booking_id=approved.pk))
    cancelled = make_booking([12], phone="03220000000")
    message_bus.handle_command(RejectBookingCommand(booking_id=cancelled.pk, reason="No show"))

    slots = SlotAvailabilityIndex(settings_store).slots_for(future_date)

    statuses = {slot.hour: str(slot.status) for slot in slots}
    assert len(slots) == 24
    assert statuses[9] == "pending"
    assert statuses[18] == statuses[19] == "booked"
    assert statuses[12] == "available"


@pytest.mark.django_db
def test_public_slots_refuse_past_dates():
    index = SlotAvailabilityIndex(settings_store)

    with pytest.raises(ValidationError) as exc_info:
        index.public_slots_for(timezone.localdate() - timedelta(days=1))
    assert exc_info.value.field == "date"


@pytest.mark.django_db
def test_calendar_merges_ranges_and_hides_cancelled(make_booking, future_date):
    booking = make_booking([9, 10, 11, 15])
    cancelled = make_booking([20], phone="03110000000")
    message_bus.handle_command(RejectBookingCommand(booking_id=cancelled.pk, reason="Rain"))
    projector = CalendarProjector()

    events = list(projector.events_for(future_date, future_date))

    assert len(events) == 1
    event = events[0]
    assert event.booking_id == booking.pk
    assert event.ranges == ("9:00 AM – 12:00 PM", "3:00 PM – 4:00 PM")
    assert event.title == "Ali Khan - 9:00 AM – 12:00 PM, 3:00 PM – 4:00 PM"
    assert event.end - event.start == timedelta(hours=7)
    assert event.to_dict()["extendedProps"]["totalHours"] == 4

    cancelled_events = list(projector.events_for(future_date, future_date, status="cancelled"))
    assert [e.booking_id for e in cancelled_events] == [cancelled.pk]


@pytest.mark.django_db
def test_calendar_events_are_lazy_and_restartable(make_booking, future_date):
    events = CalendarProjector().events_for(future_date, future_date)
    assert list(events) == []

    make_booking([22, 23])

    first_pass = list(events)
    second_pass = list(events)
    assert len(first_pass) == len(second_pass) == 1
    assert first_pass[0].end.date() == future_date + timedelta(days=1)


@pytest.mark.django_db
def test_calendar_window_validation():
    projector = CalendarProjector()
    today = timezone.localdate()

    window = projector.window()
    assert (window.start, window.end) == (today, today + timedelta(days=30))

    with pytest.raises(ValidationError) as exc_info:
        projector.window(today, today - timedelta(days=1))
    assert exc_info.value.field == "end"

    with pytest.raises(ValidationError) as exc_info:
        projector.window(status="archived")
    assert exc_info.value.field == "status"


@pytest.mark.django_db
def test_lookup_by_phone(make_booking):
    booking = make_booking([10], phone="03009998887")
    make_booking([11], phone="03110000000")

    assert [b.pk for b in lookup_bookings(" 03009998887 ")] == [booking.pk]

    with pytest.raises(ValidationError):
        lookup_bookings("03")


def test_reads_are_retried_on_transient_failures():
    calls = []

    @retry_read
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise OperationalError("canceling statement due to statement timeout")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3


def test_read_retries_are_bounded():
    calls = []

    @retry_read
    def broken():
        calls.append(1)
        raise OperationalError("server closed the connection unexpectedly")

    with pytest.raises(StoreUnavailable):
        broken()
    assert len(calls) == 3
