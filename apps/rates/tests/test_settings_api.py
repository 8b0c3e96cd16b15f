"""Integration tests for the rate settings endpoint."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.rates.models import RateSettings


class RateSettingsAPITests(APITestCase):
    def setUp(self) -> None:
        user_model = get_user_model()
        self.staff = user_model.objects.create_user(username="staff", password="StaffPass123", is_staff=True)
        self.customer = user_model.objects.create_user(username="player", password="PlayerPass123")
        self.url = reverse("rate-settings")

    def test_anyone_can_read_rates(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(Decimal(response.data["day_rate"]), Decimal("1500.00"))
        self.assertEqual(Decimal(response.data["night_rate"]), Decimal("2000.00"))
        self.assertEqual(response.data["night_window"], "17:00-07:00")

    def test_staff_can_update_rates(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.patch(self.url, {"day_rate": "1600.00", "night_end_hour": 6}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        row = RateSettings.objects.get()
        self.assertEqual(row.day_rate, Decimal("1600.00"))
        self.assertEqual(row.night_end_hour, 6)
        self.assertEqual(row.updated_by, self.staff)
        self.assertEqual(response.data["updated_by"], "staff")

    def test_non_staff_cannot_update_rates(self) -> None:
        self.client.force_authenticate(self.customer)

        response = self.client.patch(self.url, {"day_rate": "10.00"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_out_of_range_hour_is_rejected(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.patch(self.url, {"night_start_hour": 30}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["error"], "validation_error")
        self.assertEqual(response.data["field"], "night_start_hour")

    def test_unknown_field_is_rejected(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.patch(self.url, {"weekend_rate": "3000"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("weekend_rate", response.data)
