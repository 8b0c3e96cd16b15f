from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    verbose_name = "Bookings"

    def ready(self):
        from apps.rates.services import settings_store
        from shared.application.message_bus import message_bus

        from . import signals  # noqa: F401
        from .application.command_handlers import register_handlers
        from .services import slot_reservations

        register_handlers(message_bus, slot_reservations, settings_store)
