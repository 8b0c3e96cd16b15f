from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("phone", models.CharField(db_index=True, max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Customer",
                "verbose_name_plural": "Customers",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="GroundDay",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot_date", models.DateField(unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Ground day",
                "verbose_name_plural": "Ground days",
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "booking_number",
                    models.CharField(
                        blank=True,
                        editable=False,
                        help_text="Human readable number, BK-YYYYMMDD-NNNN.",
                        max_length=20,
                        null=True,
                        unique=True,
                    ),
                ),
                ("booking_date", models.DateField()),
                (
                    "total_hours",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(24),
                        ]
                    ),
                ),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("advance_payment", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "advance_payment_method",
                    models.CharField(
                        choices=[("easypaisa", "Easypaisa"), ("sadapay", "SadaPay"), ("cash", "Cash")],
                        max_length=20,
                    ),
                ),
                (
                    "advance_payment_proof",
                    models.CharField(
                        blank=True, help_text="Reference to the uploaded payment screenshot.", max_length=255
                    ),
                ),
                ("remaining_payment", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "remaining_payment_method",
                    models.CharField(
                        blank=True,
                        choices=[("easypaisa", "Easypaisa"), ("sadapay", "SadaPay"), ("cash", "Cash")],
                        max_length=20,
                    ),
                ),
                ("remaining_payment_proof", models.CharField(blank=True, max_length=255)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending approval"),
                            ("approved", "Approved"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("customer_notes", models.TextField(blank=True)),
                ("admin_notes", models.TextField(blank=True)),
                (
                    "pending_expires_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Hold timeout after which a pending booking is cancelled automatically.",
                        null=True,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("idempotency_key", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="bookings.customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["booking_date", "status"], name="booking_date_status_idx"),
                    models.Index(fields=["status", "pending_expires_at"], name="booking_status_expiry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("remaining_payment__gte", 0)),
                        name="booking_remaining_not_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("advance_payment__gte", 0),
                            ("advance_payment__lte", models.F("total_amount")),
                        ),
                        name="booking_advance_within_total",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot_date", models.DateField()),
                (
                    "slot_hour",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(23),
                        ]
                    ),
                ),
                ("is_night_rate", models.BooleanField(default=False)),
                (
                    "hourly_rate",
                    models.DecimalField(
                        decimal_places=2, help_text="Rate captured when the booking was priced.", max_digits=10
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="slots",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking slot",
                "verbose_name_plural": "Booking slots",
                "ordering": ["slot_date", "slot_hour"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("slot_date", "slot_hour"),
                        name="booking_slot_one_active_per_hour",
                    ),
                    models.UniqueConstraint(
                        fields=("booking", "slot_hour"),
                        name="booking_slot_unique_hour_per_booking",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("slot_hour__lte", 23)),
                        name="booking_slot_hour_in_day",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExtraCharge",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="extra_charges",
                        to="bookings.booking",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="extra_charge_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "method",
                    models.CharField(
                        choices=[("easypaisa", "Easypaisa"), ("sadapay", "SadaPay"), ("cash", "Cash")],
                        max_length=20,
                    ),
                ),
                ("proof", models.CharField(blank=True, max_length=255)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
                (
                    "recorded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("discount_amount__gte", 0)),
                        name="payment_discount_not_negative",
                    ),
                ],
            },
        ),
    ]
