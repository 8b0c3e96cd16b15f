"""FilterSet definitions for the admin booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for the staff booking list."""

    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    date = django_filters.DateFilter(field_name="booking_date")
    date_from = django_filters.DateFilter(field_name="booking_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="booking_date", lookup_expr="lte")
    phone = django_filters.CharFilter(field_name="customer__phone", lookup_expr="icontains")
    name = django_filters.CharFilter(field_name="customer__name", lookup_expr="icontains")
    number = django_filters.CharFilter(field_name="booking_number", lookup_expr="icontains")
    has_balance = django_filters.BooleanFilter(method="filter_has_balance")

    class Meta:
        model = Booking
        fields = ["status", "advance_payment_method"]

    def filter_has_balance(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        if value:
            return queryset.filter(remaining_payment__gt=0)
        return queryset.filter(remaining_payment=0)
