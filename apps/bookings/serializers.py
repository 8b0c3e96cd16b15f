"""Serializers for the booking domain."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .application.command_handlers import (
    AddExtraChargeCommand,
    ApproveBookingCommand,
    CompleteBookingCommand,
    CreateBookingCommand,
    CustomerInfo,
    PaymentInfo,
    RecordPaymentCommand,
    RejectBookingCommand,
    UpdateBookingHoursCommand,
)
from .domain.calendar import hour_ranges
from .models import Booking, BookingSlot, ExtraCharge, Payment, PaymentMethod


def _hours_field(**kwargs):  # type: ignore
    return serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=23),
        allow_empty=False,
        max_length=24,
        **kwargs,
    )


def _distinct_hours(value):  # type: ignore
    if len(set(value)) != len(value):
        raise serializers.ValidationError("Slot hours must not repeat.")
    return sorted(value)


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class ReserveSerializer(serializers.Serializer):
    """Public conflict check for a set of hours."""

    date = serializers.DateField()
    hours = _hours_field()


class CustomerInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, default="")


class AdvancePaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    method = serializers.ChoiceField(choices=PaymentMethod.choices)
    proof = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingCreateSerializer(serializers.Serializer):
    """Booking submission from the public booking page."""

    customer = CustomerInputSerializer()
    date = serializers.DateField()
    hours = _hours_field()
    payment = AdvancePaymentSerializer()
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    idempotency_key = serializers.CharField(required=False, allow_blank=True, max_length=64)

    def validate_hours(self, value):  # type: ignore
        return _distinct_hours(value)

    def to_command(self) -> CreateBookingCommand:
        data = self.validated_data
        return CreateBookingCommand(
            customer=CustomerInfo(**data["customer"]),
            booking_date=data["date"],
            hours=data["hours"],
            payment=PaymentInfo(**data["payment"]),
            notes=data.get("notes", ""),
            idempotency_key=data.get("idempotency_key") or None,
            auto_approve=data.get("auto_approve", False),
        )


class ManualBookingSerializer(BookingCreateSerializer):
    """Booking entered by staff, e.g. taken over the phone."""

    auto_approve = serializers.BooleanField(required=False, default=False)


class VersionedActionSerializer(serializers.Serializer):
    """Base for admin actions; ``version`` enables the stale-write check."""

    version = serializers.IntegerField(required=False, min_value=1)


class ApproveSerializer(VersionedActionSerializer):
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def to_command(self, booking_id: int) -> ApproveBookingCommand:
        return ApproveBookingCommand(
            booking_id=booking_id,
            notes=self.validated_data.get("notes"),
            expected_version=self.validated_data.get("version"),
        )


class RejectSerializer(VersionedActionSerializer):
    # Presence is checked by the lifecycle so the error names the field
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def to_command(self, booking_id: int) -> RejectBookingCommand:
        return RejectBookingCommand(
            booking_id=booking_id,
            reason=self.validated_data["reason"],
            expected_version=self.validated_data.get("version"),
        )


class CompleteSerializer(VersionedActionSerializer):

    def to_command(self, booking_id: int) -> CompleteBookingCommand:
        return CompleteBookingCommand(
            booking_id=booking_id,
            expected_version=self.validated_data.get("version"),
        )


class BookingHoursSerializer(VersionedActionSerializer):
    hours = _hours_field()

    def validate_hours(self, value):  # type: ignore
        return _distinct_hours(value)

    def to_command(self, booking_id: int) -> UpdateBookingHoursCommand:
        return UpdateBookingHoursCommand(
            booking_id=booking_id,
            hours=self.validated_data["hours"],
            expected_version=self.validated_data.get("version"),
        )


class PaymentCreateSerializer(VersionedActionSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices)
    proof = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=Decimal("0.00")
    )

    def to_command(self, booking_id: int, user) -> RecordPaymentCommand:  # type: ignore
        data = self.validated_data
        return RecordPaymentCommand(
            booking_id=booking_id,
            amount=data["amount"],
            method=data["method"],
            proof=data["proof"],
            discount=data["discount"],
            expected_version=data.get("version"),
            recorded_by=user if user.is_authenticated else None,
        )


class ExtraChargeCreateSerializer(VersionedActionSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def to_command(self, booking_id: int, user) -> AddExtraChargeCommand:  # type: ignore
        data = self.validated_data
        return AddExtraChargeCommand(
            booking_id=booking_id,
            amount=data["amount"],
            description=data["description"],
            expected_version=data.get("version"),
            created_by=user if user.is_authenticated else None,
        )


class BookingSlotSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingSlot
        fields = ["slot_date", "slot_hour", "is_night_rate", "hourly_rate", "is_active"]


class PaymentSerializer(serializers.ModelSerializer):
    recorded_by = serializers.ReadOnlyField(source="recorded_by.username", default=None)

    class Meta:
        model = Payment
        fields = ["id", "amount", "method", "proof", "discount_amount", "recorded_by", "created_at"]


class ExtraChargeSerializer(serializers.ModelSerializer):
    created_by = serializers.ReadOnlyField(source="created_by.username", default=None)

    class Meta:
        model = ExtraCharge
        fields = ["id", "amount", "description", "created_by", "created_at"]


class BookingSerializer(serializers.ModelSerializer):
    """Full booking detail for staff."""

    customer = CustomerInputSerializer(read_only=True)
    hours = serializers.SerializerMethodField()
    ranges = serializers.SerializerMethodField()
    slots = BookingSlotSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    extra_charges = ExtraChargeSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_number",
            "customer",
            "booking_date",
            "hours",
            "ranges",
            "total_hours",
            "total_amount",
            "advance_payment",
            "advance_payment_method",
            "advance_payment_proof",
            "remaining_payment",
            "remaining_payment_method",
            "remaining_payment_proof",
            "discount_amount",
            "status",
            "customer_notes",
            "admin_notes",
            "pending_expires_at",
            "approved_at",
            "completed_at",
            "cancelled_at",
            "cancellation_reason",
            "version",
            "created_at",
            "updated_at",
            "slots",
            "payments",
            "extra_charges",
        ]
        read_only_fields = fields

    def get_hours(self, obj: Booking) -> list[int]:
        return sorted(slot.slot_hour for slot in obj.slots.all())

    def get_ranges(self, obj: Booking) -> list[str]:
        hours = self.get_hours(obj)
        return hour_ranges(hours) if hours else []


class PublicBookingSerializer(serializers.ModelSerializer):
    """What a customer may see when checking a booking by phone."""

    customer_name = serializers.ReadOnlyField(source="customer.name")
    ranges = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "booking_number",
            "customer_name",
            "booking_date",
            "ranges",
            "total_hours",
            "total_amount",
            "advance_payment",
            "remaining_payment",
            "status",
            "pending_expires_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_ranges(self, obj: Booking) -> list[str]:
        hours = sorted(slot.slot_hour for slot in obj.slots.all())
        return hour_ranges(hours) if hours else []
