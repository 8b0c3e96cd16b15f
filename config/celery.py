import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("ground_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel pending bookings whose hold ran out - every minute
    "expire-pending-bookings": {
        "task": "bookings.expire_pending_bookings",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Complete approved bookings after their last hour - every hour
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=5),
    },
}
