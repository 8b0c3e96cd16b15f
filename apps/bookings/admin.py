"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingSlot, Customer, ExtraCharge, GroundDay, Payment


class BookingSlotInline(admin.TabularInline):
    model = BookingSlot
    extra = 0
    fields = ("slot_date", "slot_hour", "is_night_rate", "hourly_rate", "is_active")
    readonly_fields = fields
    can_delete = False


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("amount", "method", "discount_amount", "proof", "recorded_by", "created_at")
    readonly_fields = fields
    can_delete = False


class ExtraChargeInline(admin.TabularInline):
    model = ExtraCharge
    extra = 0
    fields = ("amount", "description", "created_by", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-mostly view; status and ledger changes go through the API."""

    list_display = (
        "booking_number",
        "customer",
        "booking_date",
        "total_hours",
        "status",
        "total_amount",
        "remaining_payment",
        "created_at",
    )
    list_filter = ("status", "booking_date", "advance_payment_method")
    search_fields = ("booking_number", "customer__name", "customer__phone")
    readonly_fields = (
        "booking_number",
        "customer",
        "booking_date",
        "total_hours",
        "total_amount",
        "advance_payment",
        "remaining_payment",
        "discount_amount",
        "status",
        "pending_expires_at",
        "approved_at",
        "completed_at",
        "cancelled_at",
        "cancellation_reason",
        "idempotency_key",
        "version",
        "created_at",
        "updated_at",
    )
    inlines = [BookingSlotInline, PaymentInline, ExtraChargeInline]


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "created_at")
    search_fields = ("name", "phone", "email")


@admin.register(GroundDay)
class GroundDayAdmin(admin.ModelAdmin):
    list_display = ("slot_date", "created_at")
    date_hierarchy = "slot_date"
