"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(
    name="notifications.dispatch",
    autoretry_for=(ConnectionError, TimeoutError),
    retry_backoff=True,
    max_retries=3,
)
def dispatch_notification(notification_id: int) -> bool:
    """Hand a stored notification to the configured dispatcher."""
    try:
        notification = Notification.objects.get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.error(f"Notification {notification_id} not found for dispatch")
        return False

    if notification.dispatched_at is not None:
        return True

    dispatcher = import_string(settings.NOTIFICATION_DISPATCHER)
    dispatcher(notification)

    Notification.objects.filter(pk=notification.pk).update(dispatched_at=timezone.now())
    return True
