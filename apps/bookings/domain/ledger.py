"""
Payment Ledger

A booking's balance is derived, never edited directly:

    remaining = total - advance - payments + extra charges - discounts

Every payment or extra charge appends a ledger row and the remaining
balance is recomputed from the rows.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")


def to_amount(value: Any, field: str, *, allow_zero: bool = False) -> Decimal:
    """Parse a money amount, rejecting negatives (and zero unless allowed)."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.", field=field)
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.", field=field)
    amount = amount.quantize(CENTS)
    if amount < ZERO or (amount == ZERO and not allow_zero):
        qualifier = "zero or more" if allow_zero else "greater than zero"
        raise ValidationError(f"{field} must be {qualifier}.", field=field)
    return amount


@dataclass(frozen=True)
class LedgerTotals(ValueObject):
    """Everything needed to derive the remaining balance of one booking."""
    total_amount: Decimal
    advance_payment: Decimal
    payments: Decimal = ZERO
    extra_charges: Decimal = ZERO
    discounts: Decimal = ZERO

    @property
    def remaining(self) -> Decimal:
        remaining = (
            self.total_amount
            - self.advance_payment
            - self.payments
            + self.extra_charges
            - self.discounts
        )
        return remaining.quantize(CENTS)


def check_advance(advance: Decimal, total: Decimal) -> None:
    if advance > total:
        raise ValidationError(
            "Advance payment cannot exceed the total amount.",
            field="advance_payment",
            total_amount=str(total),
        )


def check_payment(remaining: Decimal, amount: Decimal, discount: Optional[Decimal] = None) -> None:
    """
    Validate a payment against the current remaining balance.

    ``amount + discount`` may settle the balance exactly but never
    exceed it, so the balance cannot go negative.
    """
    discount = discount or ZERO
    if amount + discount > remaining:
        if discount:
            message = (
                f"Payment {amount} plus discount {discount} exceeds the remaining balance {remaining}."
            )
        else:
            message = f"Payment {amount} exceeds the remaining balance {remaining}."
        raise ValidationError(message, field="amount", remaining_payment=str(remaining))
