"""Admin registration for rate settings."""

from __future__ import annotations

from django.contrib import admin

from .models import RateSettings
from .services import settings_store


@admin.register(RateSettings)
class RateSettingsAdmin(admin.ModelAdmin):
    list_display = ("day_rate", "night_rate", "night_start_hour", "night_end_hour", "updated_by", "updated_at")
    readonly_fields = ("updated_by", "updated_at")

    def has_add_permission(self, request):  # type: ignore
        return not RateSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False

    def save_model(self, request, obj, form, change):  # type: ignore
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)
        settings_store.invalidate()
