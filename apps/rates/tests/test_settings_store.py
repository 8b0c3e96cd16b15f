from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.db import OperationalError

from apps.rates.models import RateSettings
from apps.rates.services import SettingsStore
from shared.domain.exceptions import StoreUnavailable, ValidationError


@pytest.mark.django_db
def test_get_creates_defaults_once():
    store = SettingsStore()

    first = store.get()
    second = store.get()

    assert RateSettings.objects.count() == 1
    assert first.pk == second.pk == RateSettings.SINGLETON_PK
    assert first.day_rate == Decimal("1500.00")
    assert first.night_rate == Decimal("2000.00")
    assert (first.night_start_hour, first.night_end_hour) == (17, 7)


@pytest.mark.django_db
def test_update_applies_partial_values_and_records_actor():
    user = get_user_model().objects.create_user(username="manager", password="pass", is_staff=True)
    store = SettingsStore()

    updated = store.update({"night_rate": "2500", "night_start_hour": 18}, actor=user)

    assert updated.night_rate == Decimal("2500.00")
    assert updated.night_start_hour == 18
    assert updated.day_rate == Decimal("1500.00")
    assert updated.updated_by == user
    assert store.get().night_rate == Decimal("2500.00")
    assert store.schedule().night_window.start_hour == 18


@pytest.mark.django_db
@pytest.mark.parametrize(
    "partial,field",
    [
        ({"day_rate": 0}, "day_rate"),
        ({"night_rate": "-5"}, "night_rate"),
        ({"night_rate": "abc"}, "night_rate"),
        ({"night_start_hour": 24}, "night_start_hour"),
        ({"night_end_hour": -1}, "night_end_hour"),
        ({"night_end_hour": True}, "night_end_hour"),
        ({"opening_hour": 6}, "opening_hour"),
    ],
)
def test_update_rejects_invalid_values(partial, field):
    store = SettingsStore()

    with pytest.raises(ValidationError) as exc_info:
        store.update(partial)

    assert exc_info.value.field == field
    assert store.get().day_rate == Decimal("1500.00")


@pytest.mark.django_db
def test_update_rejects_empty_payload():
    with pytest.raises(ValidationError):
        SettingsStore().update({})


@pytest.mark.django_db
def test_invalidate_reloads_from_database():
    store = SettingsStore()
    store.get()
    RateSettings.objects.filter(pk=RateSettings.SINGLETON_PK).update(day_rate=Decimal("1800.00"))

    assert store.get().day_rate == Decimal("1500.00")
    store.invalidate()
    assert store.get().day_rate == Decimal("1800.00")


@pytest.mark.django_db
def test_load_retries_a_failed_read():
    RateSettings.objects.get_or_create(pk=RateSettings.SINGLETON_PK)
    queryset = RateSettings.objects.filter(pk=RateSettings.SINGLETON_PK)

    with mock.patch.object(
        RateSettings.objects, "filter", side_effect=[OperationalError("database is locked"), queryset]
    ) as read:
        row = SettingsStore().load()

    assert read.call_count == 2
    assert row.pk == RateSettings.SINGLETON_PK


@pytest.mark.django_db
def test_load_does_not_retry_creating_defaults():
    store = SettingsStore()

    with mock.patch.object(
        RateSettings.objects, "get_or_create", side_effect=OperationalError("database is locked")
    ) as create:
        with pytest.raises(StoreUnavailable):
            store.load()

    assert create.call_count == 1
    assert not RateSettings.objects.exists()
