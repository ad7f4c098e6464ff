"""Amortization engine.

Pure functions deriving an EMI's remaining balance, end date, next due date
and completion from its payment fields. Every mutation path in the lifecycle
service goes through these so the formulas exist in one place.

Month arithmetic uses ``relativedelta``: adding months to a date whose day
does not exist in the target month clamps to that month's last day
(2024-01-31 + 1 month = 2024-02-29). Due dates are counted from the
start date (Jan 31, Feb 29, Mar 31, Apr 30, ...), never from the previous
clamped due date.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from emitrack.domain.entities import PaymentType

ZERO = Decimal("0")


@dataclass(frozen=True)
class Schedule:
    """Derived amortization fields for an EMI."""

    total_installments: Optional[int]
    paid_installments: int
    remaining_amount: Decimal
    next_due_date: Optional[date]
    end_date: Optional[date]
    completed: bool


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping to the last valid day."""
    return start + relativedelta(months=months)


def total_amount(
    payment_type: PaymentType, emi_amount: Decimal, total_installments: Optional[int]
) -> Decimal:
    """Full obligation of an EMI."""
    if payment_type == PaymentType.FULL_PAYMENT:
        return emi_amount
    return emi_amount * (total_installments or 0)


def remaining_amount(
    payment_type: PaymentType,
    emi_amount: Decimal,
    total_installments: Optional[int],
    paid_installments: int,
) -> Decimal:
    """Outstanding balance, never negative. Always zero for full payments and subscriptions."""
    if payment_type != PaymentType.EMI:
        return ZERO
    remaining = emi_amount * (total_installments or 0) - emi_amount * paid_installments
    return max(remaining, ZERO)


def is_complete(
    payment_type: PaymentType, total_installments: Optional[int], paid_installments: int
) -> bool:
    """Whether enough installments are paid. Subscriptions never complete."""
    if payment_type == PaymentType.SUBSCRIPTION:
        return False
    if total_installments is None:
        return False
    return paid_installments >= total_installments


def build_schedule(
    payment_type: PaymentType,
    emi_amount: Decimal,
    total_installments: Optional[int],
    paid_installments: int,
    start_date: date,
) -> Schedule:
    """Compute every derived field from scratch.

    Used at creation and whenever an edit touches the start date, amount or
    installment counts. The next due date is the first unpaid installment,
    ``start + (paid + 1)`` months.
    """
    if payment_type == PaymentType.FULL_PAYMENT:
        return Schedule(
            total_installments=1,
            paid_installments=1,
            remaining_amount=ZERO,
            next_due_date=start_date,
            end_date=start_date,
            completed=True,
        )

    next_due = add_months(start_date, paid_installments + 1)

    if payment_type == PaymentType.SUBSCRIPTION:
        return Schedule(
            total_installments=total_installments,
            paid_installments=paid_installments,
            remaining_amount=ZERO,
            next_due_date=next_due,
            end_date=None,
            completed=False,
        )

    end_date = add_months(start_date, total_installments or 0)
    completed = is_complete(payment_type, total_installments, paid_installments)
    return Schedule(
        total_installments=total_installments,
        paid_installments=paid_installments,
        remaining_amount=remaining_amount(
            payment_type, emi_amount, total_installments, paid_installments
        ),
        next_due_date=end_date if completed else next_due,
        end_date=end_date,
        completed=completed,
    )


def advance_schedule(
    payment_type: PaymentType,
    emi_amount: Decimal,
    total_installments: Optional[int],
    paid_installments: int,
    start_date: date,
    next_due_date: Optional[date],
    end_date: Optional[date],
) -> Schedule:
    """Apply one installment payment.

    The new due date is ``start + (paid + 1)`` months, the same anchor
    ``build_schedule`` uses, so a later edit that leaves the schedule alone
    does not move it. If that date is not after the current due date (after a
    bulk update moved it), the current due date rolls forward one month
    instead. The last installment sets the due date to the end date.
    """
    paid = paid_installments + 1
    completed = is_complete(payment_type, total_installments, paid)
    if completed:
        new_next_due = end_date
    else:
        new_next_due = add_months(start_date, paid + 1)
        if next_due_date is not None and new_next_due <= next_due_date:
            new_next_due = add_months(next_due_date, 1)
    return Schedule(
        total_installments=total_installments,
        paid_installments=paid,
        remaining_amount=remaining_amount(payment_type, emi_amount, total_installments, paid),
        next_due_date=new_next_due,
        end_date=end_date,
        completed=completed,
    )


def schedule_from_last_payment(
    payment_type: PaymentType,
    emi_amount: Decimal,
    total_installments: Optional[int],
    paid_installments: int,
    last_payment_date: date,
    end_date: Optional[date],
) -> Schedule:
    """Derive fields from an absolute paid count and the date of the latest payment."""
    completed = is_complete(payment_type, total_installments, paid_installments)
    if completed:
        return Schedule(
            total_installments=total_installments,
            paid_installments=paid_installments,
            remaining_amount=ZERO,
            next_due_date=end_date,
            end_date=end_date,
            completed=True,
        )
    return Schedule(
        total_installments=total_installments,
        paid_installments=paid_installments,
        remaining_amount=remaining_amount(
            payment_type, emi_amount, total_installments, paid_installments
        ),
        next_due_date=add_months(last_payment_date, 1),
        end_date=end_date,
        completed=False,
    )
