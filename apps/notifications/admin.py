"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "notification_type", "priority", "is_read", "dispatched_at", "created_at")
    list_filter = ("notification_type", "priority", "is_read")
    search_fields = ("title", "message", "booking__booking_number")
    readonly_fields = ("event_id", "payload", "dispatched_at", "created_at")
