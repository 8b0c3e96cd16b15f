"""Turn booking domain events into admin notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.utils import timezone  # type: ignore

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


# event name -> (title, message, priority); formatted with the event payload
TEMPLATES = {
    "booking_created": (
        "New booking {booking_number}",
        "{customer_name} ({customer_phone}) requested {booking_date}, hours {hours_display}. "
        "Total {total_amount}, advance {advance_payment}.",
        Notification.Priority.HIGH,
    ),
    "booking_approved": (
        "Booking {booking_number} approved",
        "Booking {booking_number} was approved.",
        Notification.Priority.NORMAL,
    ),
    "booking_rejected": (
        "Booking {booking_number} rejected",
        "Booking {booking_number} was rejected: {reason}. Released hours {hours_display}.",
        Notification.Priority.NORMAL,
    ),
    "booking_expired": (
        "Booking {booking_number} expired",
        "Booking {booking_number} was not approved in time and has been cancelled. "
        "Released hours {hours_display}.",
        Notification.Priority.NORMAL,
    ),
    "booking_completed": (
        "Booking {booking_number} completed",
        "Booking {booking_number} is complete. Remaining balance {remaining_payment}.",
        Notification.Priority.LOW,
    ),
    "booking_hours_changed": (
        "Booking {booking_number} rescheduled",
        "Booking {booking_number} on {booking_date} now covers hours {hours_display}. "
        "Total {total_amount}, remaining {remaining_payment}.",
        Notification.Priority.NORMAL,
    ),
    "payment_recorded": (
        "Payment for {booking_number}",
        "{amount} received via {method} (discount {discount_amount}). Remaining {remaining_payment}.",
        Notification.Priority.LOW,
    ),
    "extra_charge_added": (
        "Extra charge on {booking_number}",
        "{amount} added ({description}). Remaining {remaining_payment}.",
        Notification.Priority.NORMAL,
    ),
}


def _hours_display(payload: dict) -> str:
    hours = payload.get("hours") or payload.get("released_hours") or []
    return ", ".join(f"{hour:02d}:00" for hour in hours) or "none"


def build_notification(event: "DomainEvent") -> Notification:
    """Unsaved Notification describing ``event``."""
    payload = event.payload()
    title, message, priority = TEMPLATES[event.name]
    context = {**payload, "hours_display": _hours_display(payload)}
    return Notification(
        notification_type=event.name,
        priority=priority,
        title=title.format(**context),
        message=message.format(**context),
        booking_id=payload.get("booking_id"),
        event_id=event.event_id,
        payload=event.to_dict(),
    )


def record_notification(event: "DomainEvent") -> tuple[Notification, bool]:
    """Store the notification for ``event`` once; replays return the existing row."""
    notification = build_notification(event)
    return Notification.objects.get_or_create(
        event_id=event.event_id,
        defaults={
            "notification_type": notification.notification_type,
            "priority": notification.priority,
            "title": notification.title,
            "message": notification.message,
            "booking_id": notification.booking_id,
            "payload": notification.payload,
        },
    )


def handle_booking_event(event: "DomainEvent") -> None:
    """Message bus subscriber for every booking event."""
    from .tasks import dispatch_notification

    notification, created = record_notification(event)
    if not created:
        logger.info(f"Notification for event {event.event_id} already recorded")
        return
    logger.info(f"Notification {notification.pk} recorded for {event.name}")
    dispatch_notification.delay(notification.pk)


def mark_read(queryset) -> int:  # type: ignore
    return queryset.filter(is_read=False).update(is_read=True, read_at=timezone.now())
