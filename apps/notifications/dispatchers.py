"""
Notification dispatchers.

A dispatcher takes a Notification and delivers it somewhere. The one
used is named by the ``NOTIFICATION_DISPATCHER`` setting.
"""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

logger = logging.getLogger(__name__)


def log_dispatcher(notification) -> None:  # type: ignore
    logger.info(
        f"[NOTIFICATION] {notification.notification_type} ({notification.priority}): "
        f"{notification.title}"
    )


def email_dispatcher(notification) -> None:  # type: ignore
    """Email ground staff listed in ``GROUND_ADMIN_EMAILS``."""
    recipients = list(getattr(settings, "GROUND_ADMIN_EMAILS", []))
    if not recipients:
        logger.warning("GROUND_ADMIN_EMAILS is empty, notification not emailed")
        return
    send_mail(
        subject=notification.title,
        message=notification.message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipients,
        fail_silently=False,
    )
    logger.info(f"Notification {notification.pk} emailed to {len(recipients)} recipient(s)")
