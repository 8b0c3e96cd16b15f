from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
    verbose_name = "Notifications"

    def ready(self):
        from apps.bookings.domain.events import BOOKING_EVENTS
        from shared.application.message_bus import message_bus

        from .services import handle_booking_event

        message_bus.subscribe(BOOKING_EVENTS, handle_booking_event)
