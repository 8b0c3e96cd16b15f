"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.queries import SlotAvailabilityIndex
from apps.bookings.models import Booking, BookingSlot
from shared.domain.exceptions import StoreUnavailable


class BookingAPITests(APITestCase):
    """Covers submission, slot conflicts, admin actions and the calendar."""

    def setUp(self) -> None:
        user_model = get_user_model()
        self.staff = user_model.objects.create_user(username="ground-admin", password="AdminPass123", is_staff=True)
        self.player = user_model.objects.create_user(username="player", password="PlayerPass123")
        self.day = timezone.localdate() + timedelta(days=3)
        self.list_url = reverse("booking-list")

    def _payload(self, hours: list[int], phone: str = "03001234567", **extra) -> dict:
        payload = {
            "customer": {"name": "Ali Khan", "phone": phone},
            "date": str(self.day),
            "hours": hours,
            "payment": {"amount": "1000.00", "method": "easypaisa", "proof": "uploads/tx-991.png"},
        }
        payload.update(extra)
        return payload

    def _create(self, hours: list[int], **kwargs) -> dict:
        response = self.client.post(self.list_url, self._payload(hours, **kwargs), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _action(self, booking_id: int, name: str, data: dict | None = None, method: str = "patch"):
        url = reverse(f"booking-{name}", args=[booking_id])
        return getattr(self.client, method)(url, data or {}, format="json")

    # ----- public -----

    def test_guest_can_submit_booking(self) -> None:
        data = self._create([18, 19, 23, 2])

        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["hours"], [2, 18, 19, 23])
        self.assertEqual(data["total_amount"], "8000.00")
        self.assertEqual(data["remaining_payment"], "7000.00")
        self.assertEqual(data["version"], 1)
        self.assertTrue(data["booking_number"].startswith("BK-"))
        self.assertEqual(BookingSlot.objects.filter(is_active=True).count(), 4)

    def test_overlapping_submission_conflicts(self) -> None:
        self._create([14, 15])

        response = self.client.post(self.list_url, self._payload([15, 16], phone="03110000000"), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "slot_conflict")
        self.assertEqual(response.data["conflicts"], [15])
        self.assertEqual(Booking.objects.count(), 1)

    def test_invalid_hour_is_rejected(self) -> None:
        response = self.client.post(self.list_url, self._payload([25]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("hours", response.data)

    def test_advance_above_total_is_rejected(self) -> None:
        payload = self._payload([10])
        payload["payment"]["amount"] = "5000.00"

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["field"], "advance_payment")

    def test_idempotent_resubmission(self) -> None:
        first = self._create([10], idempotency_key="form-7f3a")
        second = self._create([10], idempotency_key="form-7f3a")

        self.assertEqual(first["id"], second["id"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_slot_availability(self) -> None:
        self._create([18])

        response = self.client.get(reverse("slot-list"), {"date": str(self.day)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        slots = response.data["slots"]
        self.assertEqual(len(slots), 24)
        self.assertEqual(slots[18]["status"], "pending")
        self.assertEqual(slots[18]["label"], "6:00 PM – 7:00 PM")
        self.assertEqual(slots[10]["status"], "available")
        self.assertEqual(slots[10]["rate"], "1500.00")

    def test_slot_availability_refuses_past_date(self) -> None:
        response = self.client.get(reverse("slot-list"), {"date": str(timezone.localdate() - timedelta(days=1))})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "date")

    def test_store_outage_is_reported_as_unavailable(self) -> None:
        with mock.patch.object(SlotAvailabilityIndex, "public_slots_for", side_effect=StoreUnavailable()):
            response = self.client.get(reverse("slot-list"), {"date": str(self.day)})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"], "store_unavailable")
        self.assertEqual(response["Retry-After"], "5")

    def test_reserve_check(self) -> None:
        self._create([14])
        url = reverse("slot-reserve")

        taken = self.client.post(url, {"date": str(self.day), "hours": [13, 14]}, format="json")
        free = self.client.post(url, {"date": str(self.day), "hours": [16]}, format="json")

        self.assertEqual(taken.data, {"accepted": False, "conflicts": [14]})
        self.assertEqual(free.data, {"accepted": True, "conflicts": []})

    def test_reserve_check_refuses_elapsed_hours(self) -> None:
        afternoon = timezone.make_aware(datetime.combine(self.day, time(14, 20)))

        with mock.patch("apps.bookings.views.timezone.localtime", return_value=afternoon):
            response = self.client.post(
                reverse("slot-reserve"), {"date": str(self.day), "hours": [12, 13, 14, 15]}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["field"], "hours")
        self.assertEqual(response.data["hours"], [12, 13])

    def test_lookup_by_phone(self) -> None:
        self._create([10], phone="03005550001")

        response = self.client.get(reverse("booking-lookup"), {"phone": "03005550001"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["ranges"], ["10:00 AM – 11:00 AM"])
        self.assertNotIn("customer", response.data[0])

    # ----- staff -----

    def test_list_requires_staff(self) -> None:
        self._create([10])

        self.client.force_authenticate(self.player)
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.get(self.list_url, {"status": "pending"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_approve_and_complete(self) -> None:
        booking = self._create([10])
        self.client.force_authenticate(self.staff)

        approved = self._action(booking["id"], "approve", {"notes": "Advance verified", "version": 1})
        self.assertEqual(approved.status_code, status.HTTP_200_OK, approved.data)
        self.assertEqual(approved.data["status"], "approved")
        self.assertEqual(approved.data["admin_notes"], "Advance verified")

        completed = self._action(booking["id"], "complete")
        self.assertEqual(completed.status_code, status.HTTP_200_OK, completed.data)
        self.assertEqual(completed.data["status"], "completed")

    def test_non_staff_cannot_approve(self) -> None:
        booking = self._create([10])
        self.client.force_authenticate(self.player)

        response = self._action(booking["id"], "approve")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stale_version_conflicts(self) -> None:
        booking = self._create([10])
        self.client.force_authenticate(self.staff)

        response = self._action(booking["id"], "approve", {"version": 5})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "stale_state")

    def test_reject_requires_reason_and_frees_hours(self) -> None:
        booking = self._create([10, 11])
        self.client.force_authenticate(self.staff)

        missing = self._action(booking["id"], "reject", {"reason": ""})
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(missing.data["field"], "reason")

        rejected = self._action(booking["id"], "reject", {"reason": "Payment proof invalid"})
        self.assertEqual(rejected.status_code, status.HTTP_200_OK, rejected.data)
        self.assertEqual(rejected.data["status"], "cancelled")

        again = self._action(booking["id"], "reject", {"reason": "Twice"})
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["error"], "invalid_transition")

        blank = self._action(booking["id"], "reject", {"reason": ""})
        self.assertEqual(blank.status_code, status.HTTP_409_CONFLICT, blank.data)
        self.assertEqual(blank.data["error"], "invalid_transition")

        self.client.force_authenticate(None)
        self._create([10, 11], phone="03110000000")

    def test_unknown_booking_is_not_found(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self._action(987654, "approve")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "not_found")

    def test_manual_booking_by_staff_can_skip_approval(self) -> None:
        url = reverse("booking-manual")
        payload = self._payload([20, 21], phone="03215550000", auto_approve=True)

        self.client.force_authenticate(self.player)
        self.assertEqual(self.client.post(url, payload, format="json").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.post(url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "approved")
        self.assertIsNone(response.data["pending_expires_at"])
        self.assertIsNotNone(response.data["approved_at"])

    def test_public_submission_ignores_auto_approve(self) -> None:
        data = self._create([20], auto_approve=True)

        self.assertEqual(data["status"], "pending")
        self.assertIsNotNone(data["pending_expires_at"])

    def test_staff_can_move_booking_hours(self) -> None:
        booking = self._create([14, 15])
        self._create([17], phone="03110000000")
        self.client.force_authenticate(self.staff)

        moved = self._action(booking["id"], "hours", {"hours": [16, 15], "version": 1})
        self.assertEqual(moved.status_code, status.HTTP_200_OK, moved.data)
        self.assertEqual(moved.data["hours"], [15, 16])
        self.assertEqual(moved.data["total_amount"], "3000.00")
        self.assertEqual(moved.data["remaining_payment"], "2000.00")
        self.assertEqual(moved.data["version"], 2)

        taken = self._action(booking["id"], "hours", {"hours": [16, 17]})
        self.assertEqual(taken.status_code, status.HTTP_409_CONFLICT, taken.data)
        self.assertEqual(taken.data["conflicts"], [17])

    def test_payments_and_charges(self) -> None:
        booking = self._create([18, 19])  # 4000 total, 1000 advance
        self.client.force_authenticate(self.staff)

        over = self._action(booking["id"], "payments", {"amount": "3000.01", "method": "cash"}, method="post")
        self.assertEqual(over.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(over.data["field"], "amount")

        charged = self._action(
            booking["id"], "charges", {"amount": "500.00", "description": "Extra balls"}, method="post"
        )
        self.assertEqual(charged.status_code, status.HTTP_200_OK, charged.data)
        self.assertEqual(charged.data["remaining_payment"], "3500.00")
        self.assertEqual(charged.data["extra_charges"][0]["created_by"], "ground-admin")

        paid = self._action(
            booking["id"], "payments", {"amount": "3300.00", "method": "cash", "discount": "200.00"}, method="post"
        )
        self.assertEqual(paid.status_code, status.HTTP_200_OK, paid.data)
        self.assertEqual(paid.data["remaining_payment"], "0.00")
        self.assertEqual(paid.data["discount_amount"], "200.00")
        self.assertEqual(paid.data["payments"][0]["recorded_by"], "ground-admin")

    def test_calendar(self) -> None:
        booking = self._create([9, 10, 11, 15])
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("calendar"), {"start": str(self.day), "end": str(self.day)})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)
        event = response.data["events"][0]
        self.assertEqual(event["id"], booking["id"])
        self.assertEqual(event["title"], "Ali Khan - 9:00 AM – 12:00 PM, 3:00 PM – 4:00 PM")
        self.assertEqual(event["extendedProps"]["status"], "pending")
        self.assertEqual(response.data["filters"]["start"], str(self.day))

    def test_calendar_rejects_inverted_window(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(
            reverse("calendar"), {"start": str(self.day), "end": str(self.day - timedelta(days=1))}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "end")
