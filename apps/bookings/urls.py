"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingViewSet, CalendarView, SlotAvailabilityView, SlotReserveView

router = DefaultRouter()
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("slots/", SlotAvailabilityView.as_view(), name="slot-list"),
    path("slots/reserve/", SlotReserveView.as_view(), name="slot-reserve"),
    path("calendar/", CalendarView.as_view(), name="calendar"),
    path("", include(router.urls)),
]
