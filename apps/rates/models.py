"""Rate settings model for the ground."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class RateSettings(models.Model):
    """Hourly rates and night window. Exactly one row (pk=1) exists."""

    SINGLETON_PK = 1

    day_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("1500.00"),
        help_text=_("Hourly rate outside the night window."),
    )
    night_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("2000.00"),
        help_text=_("Hourly rate inside the night window."),
    )
    night_start_hour = models.PositiveSmallIntegerField(
        default=17,
        validators=[MinValueValidator(0), MaxValueValidator(23)],
        help_text=_("First night-rate hour (inclusive)."),
    )
    night_end_hour = models.PositiveSmallIntegerField(
        default=7,
        validators=[MinValueValidator(0), MaxValueValidator(23)],
        help_text=_("First day-rate hour after the night window (exclusive)."),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rate settings")
        verbose_name_plural = _("Rate settings")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(day_rate__gt=0) & models.Q(night_rate__gt=0),
                name="rate_settings_positive_rates",
            ),
            models.CheckConstraint(
                condition=models.Q(night_start_hour__lte=23) & models.Q(night_end_hour__lte=23),
                name="rate_settings_hours_in_day",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"Day {self.day_rate} / Night {self.night_rate} "
            f"({self.night_start_hour:02d}:00-{self.night_end_hour:02d}:00)"
        )

    def save(self, *args, **kwargs):  # type: ignore
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)
