"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Reserve hours and create a pending booking
- ApproveBookingCommand: Approve a pending booking
- RejectBookingCommand: Cancel a booking and release its hours
- RecordPaymentCommand: Add a payment (and optional discount) to the ledger
- AddExtraChargeCommand: Add an extra charge to the ledger
- CompleteBookingCommand: Mark an approved booking as played
- ExpireBookingCommand: Cancel a pending booking whose hold ran out
- UpdateBookingHoursCommand: Move a booking to other hours on the same date
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, List, Optional
import logging

from django.conf import settings
from django.db import IntegrityError
from django.db.models import F, Sum
from django.utils import timezone

from apps.bookings.domain.availability import elapsed_hours
from apps.bookings.domain.events import (
    BookingApproved,
    BookingCompleted,
    BookingCreated,
    BookingExpired,
    BookingHoursChanged,
    BookingRejected,
    ExtraChargeAdded,
    PaymentRecorded,
)
from apps.bookings.domain.ledger import ZERO, LedgerTotals, check_advance, check_payment, to_amount
from apps.bookings.domain.lifecycle import BookingStatus, accepts_ledger_entries, ensure_transition, is_terminal
from apps.bookings.models import Booking, Customer, ExtraCharge, Payment, PaymentMethod
from apps.rates.domain.rates import price_hours, total_price
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidTransition, NotFound, SlotConflict, StaleState, ValidationError
from shared.domain.value_objects import HourSet

logger = logging.getLogger(__name__)

EXPIRED_REASON = "Auto-cancelled: Pending timeout expired"


# ===== Commands =====

@dataclass
class CustomerInfo:
    name: str
    phone: str
    email: str = ''


@dataclass
class PaymentInfo:
    """Advance payment submitted with a booking"""
    amount: Decimal
    method: str
    proof: str = ''


@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    ``idempotency_key`` lets a client retry a submission safely: a retry
    with the same key and the same date/hours returns the booking that
    was already created. ``auto_approve`` is for bookings entered by staff:
    the booking starts approved, with no pending hold.
    """
    customer: CustomerInfo
    booking_date: date
    hours: List[int]
    payment: PaymentInfo
    notes: str = ''
    idempotency_key: Optional[str] = None
    auto_approve: bool = False


@dataclass
class ApproveBookingCommand:
    booking_id: int
    notes: Optional[str] = None
    expected_version: Optional[int] = None


@dataclass
class RejectBookingCommand:
    booking_id: int
    reason: str
    expected_version: Optional[int] = None


@dataclass
class RecordPaymentCommand:
    booking_id: int
    amount: Decimal
    method: str
    proof: str = ''
    discount: Decimal = ZERO
    expected_version: Optional[int] = None
    recorded_by: Any = None


@dataclass
class AddExtraChargeCommand:
    booking_id: int
    amount: Decimal
    description: str = ''
    expected_version: Optional[int] = None
    created_by: Any = None


@dataclass
class CompleteBookingCommand:
    booking_id: int
    expected_version: Optional[int] = None


@dataclass
class UpdateBookingHoursCommand:
    """Move a booking to other hours on its date; the booking is repriced"""
    booking_id: int
    hours: List[int]
    expected_version: Optional[int] = None


@dataclass
class ExpireBookingCommand:
    """Issued by the hold-expiry job, not by users"""
    booking_id: int
    now: datetime = field(default_factory=timezone.now)


# ===== Helpers =====

def _clean_method(method: str, field_name: str) -> str:
    if method not in PaymentMethod.values:
        raise ValidationError(
            f"Payment method must be one of: {', '.join(PaymentMethod.values)}.",
            field=field_name,
        )
    return method


def _clean_text(value: Optional[str], field_name: str, *, max_length: int, required: bool = False) -> str:
    value = (value or '').strip()
    if required and not value:
        raise ValidationError(f"{field_name} is required.", field=field_name)
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters.", field=field_name)
    return value


def _validate_schedule(booking_date: date, hours: HourSet, now: datetime) -> None:
    if booking_date < now.date():
        raise ValidationError("Booking date cannot be in the past.", field="date")
    elapsed = elapsed_hours(booking_date, hours, now)
    if elapsed:
        raise ValidationError("Some of the selected hours have already passed.", field="hours", hours=elapsed)
    max_hours = settings.BOOKING_MAX_HOURS
    if len(hours) > max_hours:
        raise ValidationError(f"A booking can have at most {max_hours} hours.", field="hours")


class BookingHandler:
    """
    Base for handlers that change one existing booking

    Writes are optimistic: the booking is read with its ``version`` and
    saved with ``UPDATE ... WHERE version = <read version>``. If another
    writer got there first no row matches and ``StaleState`` is raised,
    rolling back the whole unit of work.
    """

    def _get_booking(self, booking_id: int) -> Booking:
        try:
            return Booking.objects.select_related("customer").get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Booking {booking_id} not found.", booking_id=booking_id)

    def _check_version(self, booking: Booking, expected_version: Optional[int]) -> None:
        if expected_version is not None and expected_version != booking.version:
            raise StaleState(current_version=booking.version)

    def _save(self, booking: Booking, read_version: int, fields: List[str]) -> None:
        booking.updated_at = timezone.now()
        values = {name: getattr(booking, name) for name in fields}
        values["updated_at"] = booking.updated_at
        updated = Booking.objects.filter(pk=booking.pk, version=read_version).update(
            version=F("version") + 1,
            **values,
        )
        if not updated:
            logger.warning(f"Booking {booking.pk} changed concurrently (read version {read_version})")
            raise StaleState(current_version=Booking.objects.filter(pk=booking.pk).values_list("version", flat=True).first())
        booking.version = read_version + 1

    def _ledger(self, booking: Booking) -> LedgerTotals:
        payments = Payment.objects.filter(booking=booking).aggregate(
            paid=Sum("amount"), discounts=Sum("discount_amount")
        )
        extras = ExtraCharge.objects.filter(booking=booking).aggregate(total=Sum("amount"))
        return LedgerTotals(
            total_amount=booking.total_amount,
            advance_payment=booking.advance_payment,
            payments=payments["paid"] or ZERO,
            extra_charges=extras["total"] or ZERO,
            discounts=payments["discounts"] or ZERO,
        )


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Validate input (date, hours, customer, advance payment)
    2. Price every hour from one snapshot of the rate settings
    3. In one transaction: create Customer + Booking, reserve the hours
       through the conflict guard, insert the slots
    4. Any conflict rolls everything back and raises SlotConflict
    5. BookingCreated (and BookingApproved when auto-approved) is
       published after commit
    """

    def __init__(self, reservations, settings_store):
        self.reservations = reservations
        self.settings_store = settings_store

    def handle(self, command: CreateBookingCommand) -> Booking:
        hours = HourSet.of(command.hours)
        now = timezone.localtime()
        _validate_schedule(command.booking_date, hours, now)

        name = _clean_text(command.customer.name, "name", max_length=120, required=True)
        phone = _clean_text(command.customer.phone, "phone", max_length=32, required=True)
        email = _clean_text(command.customer.email, "email", max_length=254)
        notes = _clean_text(command.notes, "notes", max_length=2000)
        method = _clean_method(command.payment.method, "payment_method")
        advance = to_amount(command.payment.amount, "advance_payment", allow_zero=True)
        key = _clean_text(command.idempotency_key, "idempotency_key", max_length=64) or None

        if key:
            existing = self._replay(key, command.booking_date, hours)
            if existing is not None:
                return existing

        schedule = self.settings_store.schedule()
        rates = price_hours(hours, schedule)
        total = total_price(rates)
        check_advance(advance, total)

        logger.info(
            f"Creating booking for {phone} on {command.booking_date}, hours {list(hours)}, total {total}"
        )

        try:
            with DjangoUnitOfWork() as uow:
                customer = Customer.objects.create(name=name, phone=phone, email=email)
                booking = Booking.objects.create(
                    customer=customer,
                    booking_date=command.booking_date,
                    total_hours=len(hours),
                    total_amount=total,
                    advance_payment=advance,
                    advance_payment_method=method,
                    advance_payment_proof=_clean_text(command.payment.proof, "payment_proof", max_length=255),
                    remaining_payment=LedgerTotals(total_amount=total, advance_payment=advance).remaining,
                    customer_notes=notes,
                    idempotency_key=key,
                    **self._initial_state(command.auto_approve),
                )

                result = self.reservations.reserve(command.booking_date, hours, booking=booking, rates=rates)
                if not result.accepted:
                    raise SlotConflict(result.conflicts)

                booking.booking_number = booking.format_booking_number()
                booking.save(update_fields=["booking_number"])

                uow.add_event(BookingCreated(
                    booking_id=booking.pk,
                    booking_number=booking.booking_number,
                    booking_date=booking.booking_date,
                    hours=list(hours),
                    total_amount=booking.total_amount,
                    advance_payment=booking.advance_payment,
                    customer_name=customer.name,
                    customer_phone=customer.phone,
                    pending_expires_at=booking.pending_expires_at,
                ))
                if booking.approved_at is not None:
                    uow.add_event(BookingApproved(
                        booking_id=booking.pk,
                        booking_number=booking.booking_number,
                        approved_at=booking.approved_at,
                    ))
        except IntegrityError:
            # A concurrent retry with the same key won the insert
            if key:
                existing = self._replay(key, command.booking_date, hours)
                if existing is not None:
                    return existing
            raise

        logger.info(f"Booking created: {booking.booking_number} (ID: {booking.pk}, status {booking.status})")
        return booking

    def _initial_state(self, auto_approve: bool) -> dict:
        now = timezone.now()
        if auto_approve:
            return {"status": Booking.Status.APPROVED, "approved_at": now, "pending_expires_at": None}
        return {
            "status": Booking.Status.PENDING,
            "pending_expires_at": now + timedelta(minutes=settings.BOOKING_PENDING_HOLD_MINUTES),
        }

    def _replay(self, key: str, booking_date: date, hours: HourSet) -> Optional[Booking]:
        existing = Booking.objects.select_related("customer").filter(idempotency_key=key).first()
        if existing is None:
            return None
        if existing.booking_date != booking_date or existing.hours != list(hours):
            raise ValidationError(
                "Idempotency key was already used for a different booking.",
                field="idempotency_key",
            )
        logger.info(f"Idempotent replay of booking {existing.booking_number} (key {key})")
        return existing


class ApproveBookingHandler(BookingHandler):
    """Handler for approving a pending booking"""

    def handle(self, command: ApproveBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            ensure_transition(booking.status, BookingStatus.APPROVED)

            booking.status = Booking.Status.APPROVED
            booking.approved_at = timezone.now()
            booking.pending_expires_at = None
            if command.notes is not None:
                booking.admin_notes = _clean_text(command.notes, "notes", max_length=2000)
            self._save(booking, read_version, ["status", "approved_at", "pending_expires_at", "admin_notes"])

            uow.add_event(BookingApproved(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                approved_at=booking.approved_at,
                admin_notes=booking.admin_notes,
            ))

        logger.info(f"Booking {booking.booking_number} approved")
        return booking


class RejectBookingHandler(BookingHandler):
    """Handler for rejecting a booking; its hours become bookable again"""

    def __init__(self, reservations):
        self.reservations = reservations

    def handle(self, command: RejectBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            ensure_transition(booking.status, BookingStatus.CANCELLED)
            reason = _clean_text(command.reason, "reason", max_length=255, required=True)

            booking.status = Booking.Status.CANCELLED
            booking.cancellation_reason = reason
            booking.cancelled_at = timezone.now()
            booking.pending_expires_at = None
            self._save(booking, read_version, ["status", "cancellation_reason", "cancelled_at", "pending_expires_at"])
            released = self.reservations.release(booking)

            uow.add_event(BookingRejected(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                reason=reason,
                released_hours=released,
            ))

        logger.info(f"Booking {booking.booking_number} rejected: {reason}")
        return booking


class ExpireBookingHandler(BookingHandler):
    """
    Handler for the pending-hold timeout

    Returns None when the booking is no longer due (approved or rejected
    meanwhile, or the hold was extended).
    """

    def __init__(self, reservations):
        self.reservations = reservations

    def handle(self, command: ExpireBookingCommand) -> Optional[Booking]:
        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            if (
                booking.status != Booking.Status.PENDING
                or booking.pending_expires_at is None
                or booking.pending_expires_at > command.now
            ):
                return None

            booking.status = Booking.Status.CANCELLED
            booking.cancellation_reason = EXPIRED_REASON
            booking.cancelled_at = command.now
            booking.pending_expires_at = None
            self._save(booking, read_version, ["status", "cancellation_reason", "cancelled_at", "pending_expires_at"])
            released = self.reservations.release(booking)

            uow.add_event(BookingExpired(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                released_hours=released,
            ))

        logger.info(f"Booking {booking.booking_number} expired, hours {released} released")
        return booking


class CompleteBookingHandler(BookingHandler):
    """Handler for completing an approved booking"""

    def handle(self, command: CompleteBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            ensure_transition(booking.status, BookingStatus.COMPLETED)

            booking.status = Booking.Status.COMPLETED
            booking.completed_at = timezone.now()
            self._save(booking, read_version, ["status", "completed_at"])

            uow.add_event(BookingCompleted(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                remaining_payment=booking.remaining_payment,
            ))

        logger.info(f"Booking {booking.booking_number} completed")
        return booking


class RecordPaymentHandler(BookingHandler):
    """
    Handler for recording a payment against the remaining balance

    ``amount + discount`` must not exceed the remaining balance; the
    balance is recomputed from the ledger afterwards.
    """

    def handle(self, command: RecordPaymentCommand) -> Booking:
        amount = to_amount(command.amount, "amount")
        discount = to_amount(command.discount or ZERO, "discount", allow_zero=True)
        method = _clean_method(command.method, "method")
        proof = _clean_text(command.proof, "proof", max_length=255)

        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            if not accepts_ledger_entries(booking.status):
                raise ValidationError("Cannot record a payment on a cancelled booking.", field="status")
            check_payment(booking.remaining_payment, amount, discount)

            Payment.objects.create(
                booking=booking,
                amount=amount,
                method=method,
                proof=proof,
                discount_amount=discount,
                recorded_by=command.recorded_by,
            )
            ledger = self._ledger(booking)
            booking.remaining_payment = ledger.remaining
            booking.discount_amount = ledger.discounts
            booking.remaining_payment_method = method
            if proof:
                booking.remaining_payment_proof = proof
            self._save(
                booking,
                read_version,
                ["remaining_payment", "discount_amount", "remaining_payment_method", "remaining_payment_proof"],
            )

            uow.add_event(PaymentRecorded(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                amount=amount,
                method=method,
                discount_amount=discount,
                remaining_payment=booking.remaining_payment,
            ))

        logger.info(
            f"Payment {amount} ({method}) recorded for booking {booking.booking_number}, "
            f"remaining {booking.remaining_payment}"
        )
        return booking


class AddExtraChargeHandler(BookingHandler):
    """Handler for adding an extra charge to the remaining balance"""

    def handle(self, command: AddExtraChargeCommand) -> Booking:
        amount = to_amount(command.amount, "amount")
        description = _clean_text(command.description, "description", max_length=255)

        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            if not accepts_ledger_entries(booking.status):
                raise ValidationError("Cannot add a charge to a cancelled booking.", field="status")

            ExtraCharge.objects.create(
                booking=booking,
                amount=amount,
                description=description,
                created_by=command.created_by,
            )
            booking.remaining_payment = self._ledger(booking).remaining
            self._save(booking, read_version, ["remaining_payment"])

            uow.add_event(ExtraChargeAdded(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                amount=amount,
                description=description,
                remaining_payment=booking.remaining_payment,
            ))

        logger.info(f"Extra charge {amount} added to booking {booking.booking_number}")
        return booking


class UpdateBookingHoursHandler(BookingHandler):
    """
    Handler for moving a booking to other hours on its date

    The booking's own hours never conflict with the new selection. All
    new hours are priced from the current rate settings and the balance
    is recomputed from the ledger. Completed and cancelled bookings keep
    their hours.
    """

    def __init__(self, reservations, settings_store):
        self.reservations = reservations
        self.settings_store = settings_store

    def handle(self, command: UpdateBookingHoursCommand) -> Booking:
        hours = HourSet.of(command.hours)
        schedule = self.settings_store.schedule()
        rates = price_hours(hours, schedule)
        total = total_price(rates)

        with DjangoUnitOfWork() as uow:
            booking = self._get_booking(command.booking_id)
            read_version = booking.version
            self._check_version(booking, command.expected_version)
            if is_terminal(booking.status):
                current = str(booking.status)
                raise InvalidTransition(current, current, f"Hours of a {current} booking cannot be changed.")
            _validate_schedule(booking.booking_date, hours, timezone.localtime())
            check_advance(booking.advance_payment, total)

            previous = booking.hours
            booking.total_hours = len(hours)
            booking.total_amount = total
            remaining = self._ledger(booking).remaining
            if remaining < ZERO:
                raise ValidationError(
                    "Payments already recorded exceed the new total.",
                    field="hours",
                    total_amount=str(total),
                )

            result = self.reservations.replace_hours(booking, hours, rates=rates)
            if not result.accepted:
                raise SlotConflict(result.conflicts)

            booking.remaining_payment = remaining
            self._save(booking, read_version, ["total_hours", "total_amount", "remaining_payment"])

            uow.add_event(BookingHoursChanged(
                booking_id=booking.pk,
                booking_number=booking.booking_number,
                booking_date=booking.booking_date,
                previous_hours=previous,
                hours=list(hours),
                total_amount=booking.total_amount,
                remaining_payment=booking.remaining_payment,
            ))

        logger.info(
            f"Booking {booking.booking_number} moved from hours {previous} to {list(hours)}, total {total}"
        )
        return booking


def register_handlers(bus, reservations, settings_store) -> None:
    """Wire every booking command to its handler on ``bus``."""
    bus.register_command_handler(
        CreateBookingCommand, CreateBookingHandler(reservations, settings_store).handle
    )
    bus.register_command_handler(ApproveBookingCommand, ApproveBookingHandler().handle)
    bus.register_command_handler(RejectBookingCommand, RejectBookingHandler(reservations).handle)
    bus.register_command_handler(ExpireBookingCommand, ExpireBookingHandler(reservations).handle)
    bus.register_command_handler(CompleteBookingCommand, CompleteBookingHandler().handle)
    bus.register_command_handler(RecordPaymentCommand, RecordPaymentHandler().handle)
    bus.register_command_handler(AddExtraChargeCommand, AddExtraChargeHandler().handle)
    bus.register_command_handler(
        UpdateBookingHoursCommand, UpdateBookingHoursHandler(reservations, settings_store).handle
    )
