from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.bookings.application.command_handlers import (
    CreateBookingCommand,
    CustomerInfo,
    PaymentInfo,
    RejectBookingCommand,
    UpdateBookingHoursCommand,
)
from apps.bookings.domain.events import BookingExpired
from apps.notifications.models import Notification
from apps.notifications.services import build_notification, record_notification
from apps.notifications.tasks import dispatch_notification
from shared.application.message_bus import message_bus


def _create_booking(hours=(18, 19)):
    return message_bus.handle_command(CreateBookingCommand(
        customer=CustomerInfo(name="Usman", phone="03214567890"),
        booking_date=timezone.localdate() + timedelta(days=2),
        hours=list(hours),
        payment=PaymentInfo(amount=Decimal("1000"), method="sadapay"),
    ))


@pytest.mark.django_db
def test_booking_events_become_dispatched_notifications(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        booking = _create_booking()

    notification = Notification.objects.get()
    assert notification.notification_type == Notification.Type.BOOKING_CREATED
    assert notification.priority == Notification.Priority.HIGH
    assert notification.booking == booking
    assert notification.title == f"New booking {booking.booking_number}"
    assert "Usman (03214567890)" in notification.message
    assert "18:00, 19:00" in notification.message
    assert notification.dispatched_at is not None
    assert notification.payload["event_type"] == "booking_created"


@pytest.mark.django_db
def test_rejection_mentions_reason_and_released_hours(django_capture_on_commit_callbacks):
    booking = _create_booking()

    with django_capture_on_commit_callbacks(execute=True):
        message_bus.handle_command(RejectBookingCommand(booking_id=booking.pk, reason="Ground maintenance"))

    notification = Notification.objects.get(notification_type=Notification.Type.BOOKING_REJECTED)
    assert "Ground maintenance" in notification.message
    assert "Released hours 18:00, 19:00" in notification.message


@pytest.mark.django_db
def test_rescheduled_booking_lists_new_hours(django_capture_on_commit_callbacks):
    booking = _create_booking()

    with django_capture_on_commit_callbacks(execute=True):
        message_bus.handle_command(UpdateBookingHoursCommand(booking_id=booking.pk, hours=[19, 20]))

    notification = Notification.objects.get(notification_type=Notification.Type.BOOKING_HOURS_CHANGED)
    assert notification.title == f"Booking {booking.booking_number} rescheduled"
    assert "now covers hours 19:00, 20:00" in notification.message
    assert notification.payload["payload"]["previous_hours"] == [18, 19]


@pytest.mark.django_db
def test_same_event_is_recorded_once():
    event = BookingExpired(booking_id=None, booking_number="BK-20260101-0001", released_hours=[7])

    first, created = record_notification(event)
    again, created_again = record_notification(event)

    assert created and not created_again
    assert first.pk == again.pk
    assert Notification.objects.count() == 1


def test_build_notification_without_hours():
    event = BookingExpired(booking_id=None, booking_number="BK-20260101-0002", released_hours=[])

    notification = build_notification(event)

    assert notification.title == "Booking BK-20260101-0002 expired"
    assert notification.message.endswith("Released hours none.")


@pytest.mark.django_db
def test_email_dispatcher_sends_to_ground_admins(settings, mailoutbox):
    settings.NOTIFICATION_DISPATCHER = "apps.notifications.dispatchers.email_dispatcher"
    settings.GROUND_ADMIN_EMAILS = ["ops@ground.example"]
    notification, _ = record_notification(
        BookingExpired(booking_id=None, booking_number="BK-20260101-0003", released_hours=[9])
    )

    assert dispatch_notification(notification.pk) is True

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["ops@ground.example"]
    assert mailoutbox[0].subject == "Booking BK-20260101-0003 expired"
    notification.refresh_from_db()
    assert notification.dispatched_at is not None


@pytest.mark.django_db
def test_dispatch_of_missing_notification_is_a_no_op():
    assert dispatch_notification(123456) is False


@pytest.mark.django_db
def test_staff_can_read_and_acknowledge_notifications():
    staff = get_user_model().objects.create_user(username="ops", password="OpsPass123", is_staff=True)
    for number in ("BK-20260101-0004", "BK-20260101-0005"):
        record_notification(BookingExpired(booking_id=None, booking_number=number, released_hours=[9]))
    client = APIClient()

    assert client.get(reverse("notification-list")).status_code in (
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    )

    client.force_authenticate(staff)
    listing = client.get(reverse("notification-list"), {"is_read": "false"})
    assert listing.status_code == status.HTTP_200_OK
    assert listing.data["count"] == 2

    first_id = listing.data["results"][0]["id"]
    read = client.post(reverse("notification-read", args=[first_id]))
    assert read.status_code == status.HTTP_200_OK
    assert read.data["is_read"] is True
    assert client.get(reverse("notification-unread-count")).data == {"unread": 1}

    marked = client.post(reverse("notification-mark-all-read"))
    assert marked.data == {"updated": 1}
    assert not Notification.objects.filter(is_read=False).exists()
