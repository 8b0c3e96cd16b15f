"""Booking models for the cricket ground."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.lifecycle import BookingStatus

ZERO = Decimal("0.00")


class Customer(models.Model):
    """Contact details captured with a booking. One row per submission."""

    name = models.CharField(max_length=120)
    phone = models.CharField(max_length=32, db_index=True)
    email = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Customer")
        verbose_name_plural = _("Customers")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


class PaymentMethod(models.TextChoices):
    EASYPAISA = "easypaisa", _("Easypaisa")
    SADAPAY = "sadapay", _("SadaPay")
    CASH = "cash", _("Cash")


class Booking(models.Model):
    """Reservation of one or more hourly slots on a single date."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending approval")
        APPROVED = BookingStatus.APPROVED.value, _("Approved")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")

    booking_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        editable=False,
        help_text=_("Human readable number, BK-YYYYMMDD-NNNN."),
    )
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="bookings")
    booking_date = models.DateField()
    total_hours = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(24)],
    )
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    advance_payment = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    advance_payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    advance_payment_proof = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("Reference to the uploaded payment screenshot."),
    )
    remaining_payment = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    remaining_payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)
    remaining_payment_proof = models.CharField(max_length=255, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    customer_notes = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)
    pending_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Hold timeout after which a pending booking is cancelled automatically."),
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    idempotency_key = models.CharField(max_length=64, unique=True, null=True, blank=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(remaining_payment__gte=0),
                name="booking_remaining_not_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(advance_payment__gte=0) & models.Q(advance_payment__lte=models.F("total_amount")),
                name="booking_advance_within_total",
            ),
        ]
        indexes = [
            models.Index(fields=["booking_date", "status"], name="booking_date_status_idx"),
            models.Index(fields=["status", "pending_expires_at"], name="booking_status_expiry_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_number or self.pk} on {self.booking_date}"

    @property
    def hours(self) -> list[int]:
        return sorted(slot.slot_hour for slot in self.slots.all())

    def format_booking_number(self) -> str:
        created = timezone.localtime(self.created_at) if self.created_at else timezone.localtime()
        return f"BK-{created:%Y%m%d}-{self.pk:04d}"


class BookingSlot(models.Model):
    """One booked hour. Active while the parent booking is not cancelled."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="slots")
    slot_date = models.DateField()
    slot_hour = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(23)],
    )
    is_night_rate = models.BooleanField(default=False)
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Rate captured when the booking was priced."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Booking slot")
        verbose_name_plural = _("Booking slots")
        ordering = ["slot_date", "slot_hour"]
        constraints = [
            models.UniqueConstraint(
                fields=["slot_date", "slot_hour"],
                condition=models.Q(is_active=True),
                name="booking_slot_one_active_per_hour",
            ),
            models.UniqueConstraint(
                fields=["booking", "slot_hour"],
                name="booking_slot_unique_hour_per_booking",
            ),
            models.CheckConstraint(
                condition=models.Q(slot_hour__lte=23),
                name="booking_slot_hour_in_day",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.slot_date} {self.slot_hour:02d}:00"


class ExtraCharge(models.Model):
    """Post-creation charge (damage, overtime) added to the balance."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="extra_charges")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="extra_charge_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.amount} on {self.booking_id}"


class Payment(models.Model):
    """Ledger entry for money received after the advance."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    proof = models.CharField(max_length=255, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="payment_positive"),
            models.CheckConstraint(condition=models.Q(discount_amount__gte=0), name="payment_discount_not_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.amount} via {self.method} for {self.booking_id}"


class GroundDay(models.Model):
    """Lock row: reservations for one date serialize on it."""

    slot_date = models.DateField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Ground day")
        verbose_name_plural = _("Ground days")

    def __str__(self) -> str:
        return str(self.slot_date)
