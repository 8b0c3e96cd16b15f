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
            name="RateSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "day_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("1500.00"),
                        help_text="Hourly rate outside the night window.",
                        max_digits=10,
                    ),
                ),
                (
                    "night_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("2000.00"),
                        help_text="Hourly rate inside the night window.",
                        max_digits=10,
                    ),
                ),
                (
                    "night_start_hour",
                    models.PositiveSmallIntegerField(
                        default=17,
                        help_text="First night-rate hour (inclusive).",
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(23),
                        ],
                    ),
                ),
                (
                    "night_end_hour",
                    models.PositiveSmallIntegerField(
                        default=7,
                        help_text="First day-rate hour after the night window (exclusive).",
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(23),
                        ],
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "updated_by",
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
                "verbose_name": "Rate settings",
                "verbose_name_plural": "Rate settings",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("day_rate__gt", 0), ("night_rate__gt", 0)),
                        name="rate_settings_positive_rates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("night_start_hour__lte", 23), ("night_end_hour__lte", 23)),
                        name="rate_settings_hours_in_day",
                    ),
                ],
            },
        ),
    ]
