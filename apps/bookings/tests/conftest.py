from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.bookings.application.command_handlers import (
    CreateBookingCommand,
    CustomerInfo,
    PaymentInfo,
)
from shared.application.message_bus import message_bus


@pytest.fixture
def future_date():
    return timezone.localdate() + timedelta(days=7)


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_user(username="ground-admin", password="AdminPass123", is_staff=True)


@pytest.fixture
def make_booking(db, future_date):
    """Create a pending booking through the command bus."""

    def _make(hours, *, booking_date=None, advance="500.00", phone="03001234567", key=None):
        return message_bus.handle_command(CreateBookingCommand(
            customer=CustomerInfo(name="Ali Khan", phone=phone),
            booking_date=booking_date or future_date,
            hours=list(hours),
            payment=PaymentInfo(amount=Decimal(advance), method="easypaisa"),
            idempotency_key=key,
        ))

    return _make
