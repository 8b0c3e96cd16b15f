"""URL routing for rate settings."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import RateSettingsView

urlpatterns = [
    path("", RateSettingsView.as_view(), name="rate-settings"),
]
