from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from apps.bookings.domain.availability import SlotStatus, elapsed_hours, hour_label, project_day, range_label
from apps.bookings.domain.calendar import format_ranges, hour_ranges, span_for
from apps.bookings.domain.ledger import LedgerTotals, check_advance, check_payment, to_amount
from apps.bookings.domain.lifecycle import (
    BookingStatus,
    can_transition,
    ensure_transition,
    is_terminal,
    occupies_slots,
    parse_status,
)
from apps.rates.domain.rates import NightWindow, RateSchedule
from shared.domain.exceptions import InvalidTransition, ValidationError
from shared.domain.value_objects import HourSet

SCHEDULE = RateSchedule(
    day_rate=Decimal("1500"),
    night_rate=Decimal("2000"),
    night_window=NightWindow(17, 7),
)


# ===== Lifecycle =====

@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "approved"),
        ("pending", "cancelled"),
        ("approved", "completed"),
        ("approved", "cancelled"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    ensure_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "completed"),
        ("approved", "pending"),
        ("cancelled", "approved"),
        ("cancelled", "cancelled"),
        ("completed", "cancelled"),
    ],
)
def test_disallowed_transitions_raise(current, target):
    with pytest.raises(InvalidTransition) as exc_info:
        ensure_transition(current, target)
    assert exc_info.value.detail == {"current_status": current, "target_status": target}


def test_terminal_states_and_slot_occupancy():
    assert is_terminal(BookingStatus.COMPLETED)
    assert is_terminal(BookingStatus.CANCELLED)
    assert not is_terminal(BookingStatus.PENDING)
    assert occupies_slots("completed")
    assert not occupies_slots("cancelled")


def test_parse_status_rejects_unknown_value():
    assert parse_status("approved") is BookingStatus.APPROVED
    with pytest.raises(ValidationError) as exc_info:
        parse_status("archived")
    assert exc_info.value.field == "status"


# ===== Hours =====

@pytest.mark.parametrize("hours", [[], [24], [-1], [3, 3]])
def test_hour_set_rejects_bad_input(hours):
    with pytest.raises(ValidationError):
        HourSet.of(hours)


def test_hour_set_sorts_and_merges_runs():
    hours = HourSet.of([15, 10, 9, 11])
    assert list(hours) == [9, 10, 11, 15]
    assert hours.runs() == [(9, 12), (15, 16)]


# ===== Ledger =====

def test_remaining_balance_is_derived_from_ledger():
    totals = LedgerTotals(
        total_amount=Decimal("8000"),
        advance_payment=Decimal("2000"),
        payments=Decimal("1000"),
        extra_charges=Decimal("500"),
        discounts=Decimal("500"),
    )
    assert totals.remaining == Decimal("5000.00")


def test_payment_may_settle_but_not_exceed_balance():
    check_payment(Decimal("6000"), Decimal("5500"), Decimal("500"))

    with pytest.raises(ValidationError) as exc_info:
        check_payment(Decimal("6000"), Decimal("6000.01"))
    assert exc_info.value.field == "amount"
    assert exc_info.value.detail["remaining_payment"] == "6000"


def test_advance_cannot_exceed_total():
    with pytest.raises(ValidationError) as exc_info:
        check_advance(Decimal("9000"), Decimal("8000"))
    assert exc_info.value.field == "advance_payment"


@pytest.mark.parametrize("value", ["abc", "-1", "0", None, "NaN"])
def test_to_amount_rejects_non_positive_or_non_numeric(value):
    with pytest.raises(ValidationError):
        to_amount(value, "amount")


def test_to_amount_allows_zero_when_asked():
    assert to_amount("0", "advance_payment", allow_zero=True) == Decimal("0.00")


# ===== Labels and ranges =====

@pytest.mark.parametrize(
    "hour,label",
    [(0, "12:00 AM"), (9, "9:00 AM"), (12, "12:00 PM"), (14, "2:00 PM"), (24, "12:00 AM")],
)
def test_hour_label(hour, label):
    assert hour_label(hour) == label


def test_range_labels_merge_contiguous_hours():
    assert range_label(23, 24) == "11:00 PM – 12:00 AM"
    assert hour_ranges([14, 15, 16]) == ["2:00 PM – 5:00 PM"]
    assert format_ranges([9, 10, 11, 15]) == "9:00 AM – 12:00 PM, 3:00 PM – 4:00 PM"


def test_last_hour_ends_at_next_midnight():
    start, end = span_for(date(2026, 5, 1), HourSet.of([22, 23]))
    assert start == datetime(2026, 5, 1, 22)
    assert end == datetime(2026, 5, 2, 0)


# ===== Day projection =====

def test_project_day_marks_elapsed_hours_today():
    now = datetime(2026, 5, 1, 10, 30)

    slots = project_day(date(2026, 5, 1), {5: "approved", 14: "pending"}, SCHEDULE, now)

    assert len(slots) == 24
    by_hour = {slot.hour: slot for slot in slots}
    assert by_hour[4].status is SlotStatus.PAST
    assert by_hour[5].status is SlotStatus.BOOKED
    assert by_hour[10].status is SlotStatus.AVAILABLE
    assert by_hour[14].status is SlotStatus.PENDING
    assert by_hour[10].rate == Decimal("1500.00")
    assert by_hour[18].is_night


def test_project_day_future_and_past_dates():
    now = datetime(2026, 5, 1, 10, 30)

    future = project_day(date(2026, 5, 2), {}, SCHEDULE, now)
    past = project_day(date(2026, 4, 30), {}, SCHEDULE, now)

    assert {slot.status for slot in future} == {SlotStatus.AVAILABLE}
    assert {slot.status for slot in past} == {SlotStatus.PAST}


def test_project_day_ignores_cancelled_holders():
    now = datetime(2026, 5, 1, 10, 30)

    slots = project_day(date(2026, 5, 2), {14: "cancelled", 15: "completed"}, SCHEDULE, now)

    assert slots[14].status is SlotStatus.AVAILABLE
    assert slots[15].status is SlotStatus.BOOKED


def test_elapsed_hours_only_applies_to_today():
    now = datetime(2026, 5, 1, 14, 5)

    assert elapsed_hours(date(2026, 5, 1), [12, 13, 14, 15], now) == [12, 13]
    assert elapsed_hours(date(2026, 5, 2), [0, 1], now) == []


def test_slot_view_to_dict():
    slot = project_day(date(2026, 5, 2), {}, SCHEDULE, datetime(2026, 5, 1, 8))[18]

    assert slot.to_dict() == {
        "hour": 18,
        "label": "6:00 PM – 7:00 PM",
        "status": "available",
        "rate": "2000.00",
        "is_night": True,
    }


def test_calendar_span_uses_given_timezone():
    from zoneinfo import ZoneInfo

    tz = ZoneInfo("Asia/Karachi")
    start, end = span_for(date(2026, 5, 1), HourSet.of([9, 10, 11, 15]), tz)
    assert start.tzinfo is tz
    assert end - start == timedelta(hours=7)
