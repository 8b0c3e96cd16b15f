from dataclasses import dataclass

import pytest

from apps.bookings.domain.events import BookingExpired
from shared.application.message_bus import MessageBus


@dataclass
class Ping:
    value: int


def test_command_goes_to_its_single_handler():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: command.value * 2)

    assert bus.handle_command(Ping(21)) == 42
    with pytest.raises(ValueError):
        bus.register_command_handler(Ping, lambda command: None)


def test_unregistered_command_is_a_lookup_error():
    with pytest.raises(LookupError):
        MessageBus().handle_command(Ping(1))


def test_failing_subscriber_does_not_stop_the_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("mail server down")

    bus.subscribe([BookingExpired], broken)
    bus.subscribe([BookingExpired], seen.append)
    bus.subscribe([BookingExpired], seen.append)

    event = BookingExpired(booking_id=1, booking_number="BK-20260101-0001", released_hours=[9])
    bus.publish_events([event])

    assert seen == [event]
    assert len(bus.subscribers(BookingExpired)) == 2
