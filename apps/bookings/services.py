"""Slot reservation: the conflict guard for concurrent booking requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Sequence, Tuple, TYPE_CHECKING

from django.db import IntegrityError, transaction  # type: ignore

from apps.rates.domain.rates import HourlyRate
from shared.domain.value_objects import HourSet
from shared.infrastructure.store import lock_queryset_if_possible, translate_store_errors

from .models import BookingSlot, GroundDay

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationResult:
    accepted: bool
    conflicts: Tuple[int, ...] = ()


class SlotReservationService:
    """
    Check-and-reserve hours on one date, all or nothing.

    Reservations for the same date serialize on the date's GroundDay row
    (SELECT ... FOR UPDATE). Occupancy of the requested hours is re-read
    after the lock is held, so two concurrent requests for an hour cannot
    both see it free. The partial unique index on active slots is the
    final safety net; an insert that trips it is reported as a conflict.
    """

    def reserve(
        self,
        slot_date: date,
        hours: Iterable[int],
        *,
        booking: "Booking | None" = None,
        rates: Sequence[HourlyRate] = (),
    ) -> ReservationResult:
        """
        Without ``booking`` this is a locked availability check that writes
        nothing. With ``booking`` the slot rows are inserted, priced from
        ``rates``, in the same transaction as the check.
        """
        hour_set = HourSet.of(hours)
        priced = self._priced(hour_set, rates) if booking is not None else {}

        with translate_store_errors(), transaction.atomic():
            self._lock_day(slot_date, create=booking is not None)

            conflicts = self._occupied(slot_date, hour_set)
            if conflicts:
                logger.info(f"Reservation on {slot_date} rejected, hours {list(conflicts)} are taken")
                return ReservationResult(accepted=False, conflicts=conflicts)

            if booking is None:
                return ReservationResult(accepted=True)

            try:
                with transaction.atomic():
                    self._insert(booking, slot_date, hour_set, priced)
            except IntegrityError:
                return self._collision(booking, slot_date, hour_set)

        logger.info(f"Reserved {slot_date} hours {list(hour_set)} for booking {booking.pk}")
        return ReservationResult(accepted=True)

    def release(self, booking: "Booking") -> list[int]:
        """Free the booking's hours. Returns the released hours."""
        with translate_store_errors(), transaction.atomic():
            active = BookingSlot.objects.filter(booking=booking, is_active=True)
            hours = sorted(active.values_list("slot_hour", flat=True))
            active.update(is_active=False)
        if hours:
            logger.info(f"Released hours {hours} of booking {booking.pk}")
        return hours

    def replace_hours(
        self,
        booking: "Booking",
        hours: Iterable[int],
        *,
        rates: Sequence[HourlyRate],
    ) -> ReservationResult:
        """
        Move ``booking`` to ``hours`` on its own date, all or nothing.

        The booking's current hours do not count as conflicts. Its slot
        rows are replaced by freshly priced ones under the date's lock.
        """
        hour_set = HourSet.of(hours)
        priced = self._priced(hour_set, rates)
        slot_date = booking.booking_date

        with translate_store_errors(), transaction.atomic():
            self._lock_day(slot_date, create=True)

            conflicts = self._occupied(slot_date, hour_set, exclude_booking=booking)
            if conflicts:
                logger.info(
                    f"Moving booking {booking.pk} on {slot_date} rejected, hours {list(conflicts)} are taken"
                )
                return ReservationResult(accepted=False, conflicts=conflicts)

            try:
                with transaction.atomic():
                    BookingSlot.objects.filter(booking=booking).delete()
                    self._insert(booking, slot_date, hour_set, priced)
            except IntegrityError:
                return self._collision(booking, slot_date, hour_set)

        logger.info(f"Booking {booking.pk} moved to {slot_date} hours {list(hour_set)}")
        return ReservationResult(accepted=True)

    def _priced(self, hours: HourSet, rates: Sequence[HourlyRate]) -> Dict[int, HourlyRate]:
        priced = {rate.hour: rate for rate in rates}
        if set(priced) != set(hours):
            raise ValueError("Every reserved hour needs a rate")
        return priced

    def _insert(self, booking: "Booking", slot_date: date, hours: HourSet, priced: Dict[int, HourlyRate]) -> None:
        BookingSlot.objects.bulk_create([
            BookingSlot(
                booking=booking,
                slot_date=slot_date,
                slot_hour=hour,
                is_night_rate=priced[hour].is_night_rate,
                hourly_rate=priced[hour].amount,
            )
            for hour in hours
        ])

    def _collision(self, booking: "Booking", slot_date: date, hours: HourSet) -> ReservationResult:
        conflicts = self._occupied(slot_date, hours, exclude_booking=booking) or tuple(hours)
        logger.warning(
            f"Slot insert for booking {booking.pk} on {slot_date} hit the unique index, "
            f"hours {list(conflicts)}"
        )
        return ReservationResult(accepted=False, conflicts=conflicts)

    def _lock_day(self, slot_date: date, *, create: bool) -> None:
        if create:
            GroundDay.objects.get_or_create(slot_date=slot_date)
        list(lock_queryset_if_possible(GroundDay.objects.filter(slot_date=slot_date)))

    def _occupied(
        self, slot_date: date, hours: HourSet, *, exclude_booking: "Booking | None" = None
    ) -> Tuple[int, ...]:
        slots = BookingSlot.objects.filter(slot_date=slot_date, slot_hour__in=list(hours), is_active=True)
        if exclude_booking is not None:
            slots = slots.exclude(booking=exclude_booking)
        occupied = lock_queryset_if_possible(slots).values_list("slot_hour", flat=True)
        return tuple(sorted(set(occupied)))


slot_reservations = SlotReservationService()
