"""Notification model.

One row per booking event, shown in the admin notification feed and
handed to the configured dispatcher (log, email) by a Celery task.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message for ground staff about a booking event."""

    class Type(models.TextChoices):
        BOOKING_CREATED = "booking_created", _("New booking")
        BOOKING_APPROVED = "booking_approved", _("Booking approved")
        BOOKING_REJECTED = "booking_rejected", _("Booking rejected")
        BOOKING_EXPIRED = "booking_expired", _("Booking expired")
        BOOKING_COMPLETED = "booking_completed", _("Booking completed")
        BOOKING_HOURS_CHANGED = "booking_hours_changed", _("Booking hours changed")
        PAYMENT_RECORDED = "payment_recorded", _("Payment recorded")
        EXTRA_CHARGE_ADDED = "extra_charge_added", _("Extra charge added")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        NORMAL = "normal", _("Normal")
        HIGH = "high", _("High")

    notification_type = models.CharField(max_length=32, choices=Type.choices)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    event_id = models.UUIDField(unique=True, null=True, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    dispatched_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_read", "created_at"], name="notification_unread_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_notification_type_display()}: {self.title}"
