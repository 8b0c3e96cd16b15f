"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from celery import shared_task  # type: ignore
from django.db.models import Max  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError

from .application.command_handlers import CompleteBookingCommand, ExpireBookingCommand
from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_pending_bookings")
def expire_pending_bookings() -> dict[str, int]:
    """
    Cancel pending bookings whose hold has run out.

    Looks for PENDING bookings with ``pending_expires_at`` in the past,
    cancels them and releases their hours.

    Runs every minute via Celery Beat.

    Returns:
        dict: {"expired": number of cancelled bookings}
    """
    now = timezone.now()
    expired_count = 0

    due_ids = list(
        Booking.objects.filter(
            status=Booking.Status.PENDING,
            pending_expires_at__lte=now,
        ).values_list("pk", flat=True)
    )

    for booking_id in due_ids:
        try:
            if message_bus.handle_command(ExpireBookingCommand(booking_id=booking_id, now=now)):
                expired_count += 1
        except DomainError as e:
            logger.error(f"Error expiring booking {booking_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count}


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete approved bookings once their last hour has ended.

    Runs every hour.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    now = timezone.localtime()
    tz = timezone.get_current_timezone()
    completed_count = 0

    candidates = (
        Booking.objects.filter(
            status=Booking.Status.APPROVED,
            booking_date__lte=now.date(),
        )
        .annotate(last_hour=Max("slots__slot_hour"))
        .values_list("pk", "booking_date", "last_hour")
    )

    for booking_id, booking_date, last_hour in list(candidates):
        if last_hour is None:
            continue
        ends_at = datetime.combine(booking_date, time(0), tzinfo=tz) + timedelta(hours=last_hour + 1)
        if ends_at > now:
            continue
        try:
            message_bus.handle_command(CompleteBookingCommand(booking_id=booking_id))
            completed_count += 1
        except DomainError as e:
            logger.error(f"Error completing booking {booking_id}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}
