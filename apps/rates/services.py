"""Settings store: load, cache and update the singleton rate settings."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from django.conf import settings  # type: ignore
from django.core.cache import cache  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ValidationError
from shared.infrastructure.store import lock_queryset_if_possible, retry_read, translate_store_errors

from .domain.rates import RateSchedule
from .models import RateSettings

logger = logging.getLogger(__name__)

SETTINGS_CACHE_KEY = "rates:settings"

RATE_FIELDS = ("day_rate", "night_rate")
HOUR_FIELDS = ("night_start_hour", "night_end_hour")


def _clean_rate(name: str, value: Any) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{name} must be a number.", field=name)
    if not rate.is_finite() or rate <= 0:
        raise ValidationError(f"{name} must be greater than zero.", field=name)
    return rate.quantize(Decimal("0.01"))


def _clean_hour(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer hour.", field=name)
    try:
        hour = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer hour.", field=name)
    if hour != value and str(hour) != str(value):
        raise ValidationError(f"{name} must be an integer hour.", field=name)
    if not 0 <= hour <= 23:
        raise ValidationError(f"{name} must be between 0 and 23.", field=name)
    return hour


def clean_settings_update(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update and return normalised values."""
    if not partial:
        raise ValidationError("No settings supplied.")
    unknown = set(partial) - set(RATE_FIELDS) - set(HOUR_FIELDS)
    if unknown:
        name = sorted(unknown)[0]
        raise ValidationError(f"Unknown setting '{name}'.", field=name)

    cleaned: dict[str, Any] = {}
    for name, value in partial.items():
        if name in RATE_FIELDS:
            cleaned[name] = _clean_rate(name, value)
        else:
            cleaned[name] = _clean_hour(name, value)
    return cleaned


class SettingsStore:
    """
    Process-wide access to the rate settings record.

    ``load()`` reads the row (creating it with defaults on first use) and
    primes the cache; ``get()`` serves from cache and falls back to
    ``load()``; ``update()`` locks the row, applies a validated partial
    update and refreshes the cache. Existing bookings are unaffected since
    each slot stores the rate it was priced with.
    """

    def __init__(self, cache_backend=None, cache_timeout: int | None = None):
        self._cache = cache_backend or cache
        self._timeout = cache_timeout if cache_timeout is not None else getattr(
            settings, "RATE_SETTINGS_CACHE_TIMEOUT", 300
        )

    def load(self) -> RateSettings:
        row = self._fetch()
        if row is None:
            with translate_store_errors():
                row, created = RateSettings.objects.get_or_create(pk=RateSettings.SINGLETON_PK)
            if created:
                logger.info("Rate settings initialised with defaults")
        self._cache.set(SETTINGS_CACHE_KEY, row, self._timeout)
        return row

    @retry_read
    def _fetch(self) -> RateSettings | None:
        return RateSettings.objects.filter(pk=RateSettings.SINGLETON_PK).first()

    def get(self) -> RateSettings:
        cached = self._cache.get(SETTINGS_CACHE_KEY)
        if cached is not None:
            return cached
        return self.load()

    def schedule(self) -> RateSchedule:
        return RateSchedule.from_settings(self.get())

    def update(self, partial: Mapping[str, Any], actor=None) -> RateSettings:
        cleaned = clean_settings_update(partial)

        with DjangoUnitOfWork():
            RateSettings.objects.get_or_create(pk=RateSettings.SINGLETON_PK)
            row = lock_queryset_if_possible(
                RateSettings.objects.filter(pk=RateSettings.SINGLETON_PK)
            ).get()
            for name, value in cleaned.items():
                setattr(row, name, value)
            row.updated_by = actor if getattr(actor, "is_authenticated", False) else None
            row.save()

        self._cache.set(SETTINGS_CACHE_KEY, row, self._timeout)
        logger.info(
            f"Rate settings updated by {getattr(actor, 'pk', None) or 'system'}: "
            f"{', '.join(f'{k}={v}' for k, v in cleaned.items())}"
        )
        return row

    def invalidate(self) -> None:
        self._cache.delete(SETTINGS_CACHE_KEY)


settings_store = SettingsStore()
