"""EMI lifecycle domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from emitrack.database.base import Database
from emitrack.domain import amortization
from emitrack.domain.entities import (
    BulkTransactionsResult,
    Emi,
    EmiStatus,
    EmiSummary,
    EmiType,
    PaymentMethod,
    PaymentResult,
    PaymentType,
    Recurring,
    RecurringFrequency,
    TransactionType,
)
from emitrack.domain.errors import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    emi_not_found,
    inactive_emi,
    invalid_choice,
    not_owner,
)

logger = logging.getLogger(__name__)

PAYMENT_DESCRIPTION_PREFIX = "EMI Payment:"
MAX_BULK_PAYMENTS = 60
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 500


def payment_description(emi_name: str) -> str:
    """Ledger description for a payment into the named EMI."""
    return f"{PAYMENT_DESCRIPTION_PREFIX} {emi_name}"


def coerce_enum(enum_cls: Any, value: Any, field: str) -> Any:
    """Convert a raw value into an enum member, raising ValidationError otherwise."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = [member.value for member in enum_cls]
        raise ValidationError(invalid_choice(field, str(value), choices), field=field)


def validate_notes(notes: Optional[str]) -> Optional[str]:
    """Trim notes and enforce the length limit."""
    if notes is None:
        return None
    notes = notes.strip()
    if len(notes) > NOTES_MAX_LENGTH:
        raise ValidationError(
            f"Notes cannot exceed {NOTES_MAX_LENGTH} characters", field="notes"
        )
    return notes


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        raise ValidationError(
            f"Name must be at least {NAME_MIN_LENGTH} characters long", field="name"
        )
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"EMI name cannot be more than {NAME_MAX_LENGTH} characters", field="name"
        )
    return name


def _validate_non_negative_amount(amount: Decimal, field: str, label: str) -> Decimal:
    amount = Decimal(amount)
    if amount < 0:
        raise ValidationError(f"{label} must be a positive number", field=field)
    return amount


class EmiService:
    """Service for managing the EMI lifecycle."""

    def __init__(self, db: Database):
        """Initialize EMI service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_owned(self, emi_id: int, user_id: str, action: str = "access") -> Emi:
        emi = self.db.get_emi(emi_id)
        if emi is None:
            raise NotFoundError(emi_not_found(emi_id))
        if emi.user_id != user_id:
            raise UnauthorizedError(not_owner("EMI", action))
        return emi

    def create_emi(
        self,
        user_id: str,
        name: str,
        emi_type: EmiType | str,
        payment_type: PaymentType | str,
        emi_amount: Optional[Decimal],
        start_date: date,
        total_installments: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Emi:
        """Create an EMI with its initial schedule.

        Args:
            user_id: Owning user
            name: EMI name
            emi_type: EMI classification
            payment_type: emi, full_payment or subscription
            emi_amount: Per-installment charge (or the one-off amount for full payments)
            start_date: Date the obligation starts
            total_installments: Installment count, required for the emi payment type
            notes: Optional notes

        Returns:
            The created EMI, status active

        Raises:
            ValidationError: If payment-type-specific fields are missing or invalid
        """
        name = _validate_name(name)
        emi_type = coerce_enum(EmiType, emi_type, "type")
        payment_type = coerce_enum(PaymentType, payment_type, "paymentType")
        notes = validate_notes(notes)

        if start_date is None:
            raise ValidationError("Please provide a valid start date", field="startDate")
        if emi_amount is None:
            if payment_type == PaymentType.SUBSCRIPTION:
                raise ValidationError(
                    "Amount is required for subscription payment type", field="emiAmount"
                )
            if payment_type == PaymentType.EMI:
                raise ValidationError(
                    "EMI amount is required for EMI payment type", field="emiAmount"
                )
            raise ValidationError("Amount is required for full payment", field="emiAmount")
        emi_amount = _validate_non_negative_amount(emi_amount, "emiAmount", "EMI amount")
        if total_installments is not None and total_installments < 0:
            raise ValidationError(
                "Total installments must be a non-negative integer", field="totalInstallments"
            )

        if payment_type == PaymentType.EMI:
            if emi_amount == 0:
                raise ValidationError(
                    "EMI amount is required for EMI payment type", field="emiAmount"
                )
            if not total_installments:
                raise ValidationError(
                    "Total installments is required for EMI payment type",
                    field="totalInstallments",
                )
        elif payment_type == PaymentType.SUBSCRIPTION:
            if emi_amount == 0:
                raise ValidationError(
                    "Amount is required for subscription payment type", field="emiAmount"
                )
            # Subscriptions have no installment count
            total_installments = None

        schedule = amortization.build_schedule(
            payment_type=payment_type,
            emi_amount=emi_amount,
            total_installments=total_installments,
            paid_installments=0,
            start_date=start_date,
        )

        emi_id = self.db.create_emi(
            user_id=user_id,
            name=name,
            emi_type=emi_type,
            payment_type=payment_type,
            emi_amount=emi_amount,
            total_installments=schedule.total_installments,
            paid_installments=schedule.paid_installments,
            remaining_amount=schedule.remaining_amount,
            start_date=start_date,
            next_due_date=schedule.next_due_date,
            end_date=schedule.end_date,
            status=EmiStatus.ACTIVE,
            notes=notes,
        )
        logger.info("Created %s '%s' (id=%s) for user %s", payment_type.value, name, emi_id, user_id)
        return self.db.get_emi(emi_id)

    def get_emi(self, user_id: str, emi_id: int) -> Emi:
        """Get an EMI owned by the user.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
        """
        return self._require_owned(emi_id, user_id)

    def list_emis(
        self,
        user_id: str,
        status: Optional[EmiStatus | str] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None,
    ) -> list[Emi]:
        """List a user's EMIs ordered by next due date."""
        if status is not None:
            status = coerce_enum(EmiStatus, status, "status")
        return self.db.list_emis(user_id, status=status, due_from=due_from, due_to=due_to)

    def update_emi(
        self,
        user_id: str,
        emi_id: int,
        name: Optional[str] = None,
        emi_type: Optional[EmiType | str] = None,
        payment_type: Optional[PaymentType | str] = None,
        emi_amount: Optional[Decimal] = None,
        total_installments: Optional[int] = None,
        paid_installments: Optional[int] = None,
        start_date: Optional[date] = None,
        status: Optional[EmiStatus | str] = None,
        notes: Optional[str] = None,
    ) -> Emi:
        """Apply a partial edit and recompute derived fields.

        Derived fields are recomputed when the start date, amount, either
        installment count or the payment type changes, always with the
        resulting payment type. Switching to full_payment forces the terminal
        one-payment state.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
            ValidationError: If a field is invalid or switching to emi without
                an amount and installment count
        """
        emi = self._require_owned(emi_id, user_id, action="update")
        changes: dict[str, Any] = {}

        if name is not None:
            changes["name"] = _validate_name(name)
        if emi_type is not None:
            changes["type"] = coerce_enum(EmiType, emi_type, "type")
        if status is not None:
            changes["status"] = coerce_enum(EmiStatus, status, "status")
        if notes is not None:
            changes["notes"] = validate_notes(notes)
        if emi_amount is not None:
            changes["emi_amount"] = _validate_non_negative_amount(
                emi_amount, "emiAmount", "EMI amount"
            )
        if total_installments is not None:
            if total_installments < 0:
                raise ValidationError(
                    "Total installments must be a non-negative integer",
                    field="totalInstallments",
                )
            changes["total_installments"] = total_installments
        if paid_installments is not None:
            if paid_installments < 0:
                raise ValidationError(
                    "Paid installments cannot be negative", field="paidInstallments"
                )
            changes["paid_installments"] = paid_installments
        if start_date is not None:
            changes["start_date"] = start_date

        new_payment_type = emi.payment_type
        if payment_type is not None:
            new_payment_type = coerce_enum(PaymentType, payment_type, "paymentType")
            changes["payment_type"] = new_payment_type

        type_changed = new_payment_type != emi.payment_type
        if new_payment_type == PaymentType.SUBSCRIPTION:
            changes.pop("total_installments", None)
            if emi.total_installments is not None:
                changes["total_installments"] = None
        updated = replace(emi, **changes)

        if type_changed and new_payment_type == PaymentType.EMI:
            if not emi_amount and not emi.emi_amount:
                raise ValidationError(
                    "EMI amount is required when switching to EMI payment type",
                    field="emiAmount",
                )
            if not total_installments and not emi.total_installments:
                raise ValidationError(
                    "Total installments is required when switching to EMI payment type",
                    field="totalInstallments",
                )
        if new_payment_type == PaymentType.EMI and not updated.emi_amount:
            raise ValidationError(
                "EMI amount is required for EMI payment type", field="emiAmount"
            )
        if new_payment_type == PaymentType.EMI and not updated.total_installments:
            raise ValidationError(
                "Total installments must be at least 1", field="totalInstallments"
            )

        recompute = type_changed or any(
            key in changes
            for key in ("start_date", "total_installments", "emi_amount", "paid_installments")
        )
        if recompute:
            schedule = amortization.build_schedule(
                new_payment_type,
                updated.emi_amount,
                updated.total_installments,
                updated.paid_installments,
                updated.start_date,
            )
            updated = self._with_schedule(updated, schedule)
            # full_payment schedules are terminal but keep their status
            if (
                schedule.completed
                and new_payment_type == PaymentType.EMI
                and updated.status == EmiStatus.ACTIVE
                and "status" not in changes
            ):
                updated = replace(updated, status=EmiStatus.COMPLETED)

        logger.info("Updated EMI %s (recomputed=%s)", emi_id, recompute)
        return self.db.save_emi(updated)

    @staticmethod
    def _with_schedule(emi: Emi, schedule: amortization.Schedule) -> Emi:
        return replace(
            emi,
            total_installments=schedule.total_installments,
            paid_installments=schedule.paid_installments,
            remaining_amount=schedule.remaining_amount,
            next_due_date=schedule.next_due_date,
            end_date=schedule.end_date,
        )

    def apply_installment(self, emi: Emi) -> Emi:
        """Record one installment against an active EMI without writing a ledger entry.

        Increments the paid count, recomputes the balance, moves the due date
        to the next installment and completes the EMI when the last
        installment is paid.

        Raises:
            InvalidStateError: If the EMI is not active or is a full payment,
                which is settled at creation
        """
        if not emi.is_active:
            raise InvalidStateError(inactive_emi("make payment"))
        if emi.payment_type == PaymentType.FULL_PAYMENT:
            raise InvalidStateError(
                f"EMI '{emi.name}' is a full payment and is already paid in full"
            )

        schedule = amortization.advance_schedule(
            payment_type=emi.payment_type,
            emi_amount=emi.emi_amount,
            total_installments=emi.total_installments,
            paid_installments=emi.paid_installments,
            start_date=emi.start_date,
            next_due_date=emi.next_due_date,
            end_date=emi.end_date,
        )
        updated = replace(
            emi,
            paid_installments=schedule.paid_installments,
            remaining_amount=schedule.remaining_amount,
            next_due_date=schedule.next_due_date,
        )
        if schedule.completed:
            updated = replace(updated, status=EmiStatus.COMPLETED)
            logger.info("EMI '%s' (id=%s) completed", emi.name, emi.id)
        return self.db.save_emi(updated)

    def record_payment(
        self,
        user_id: str,
        emi_id: int,
        amount: Decimal,
        payment_date: date,
        notes: Optional[str] = None,
    ) -> PaymentResult:
        """Record a single EMI payment and its ledger transaction.

        The transaction amount is whatever the caller paid; it is not checked
        against the installment amount.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
            InvalidStateError: If the EMI is not active
            ValidationError: If the amount is negative
        """
        amount = _validate_non_negative_amount(amount, "amount", "Payment amount")
        notes = validate_notes(notes)
        if payment_date is None:
            raise ValidationError("Please provide a valid payment date", field="date")

        emi = self._require_owned(emi_id, user_id)
        emi = self.apply_installment(emi)

        transaction_id = self.db.create_transaction(
            user_id=user_id,
            transaction_type=TransactionType.EXPENSE,
            amount=amount,
            description=payment_description(emi.name),
            date=payment_date,
            payment_method=PaymentMethod.BANK_TRANSFER,
            notes=notes or f"EMI payment for {emi.name}",
            recurring=Recurring(
                is_recurring=True,
                frequency=RecurringFrequency.MONTHLY,
                next_due_date=emi.next_due_date,
            ),
            emi_id=emi.id,
        )
        logger.info(
            "Recorded payment %s for EMI '%s' (id=%s), %s/%s paid",
            amount,
            emi.name,
            emi.id,
            emi.paid_installments,
            emi.total_installments,
        )
        return PaymentResult(emi=emi, transaction=self.db.get_transaction(transaction_id))

    def create_bulk_transactions(
        self,
        user_id: str,
        emi_id: int,
        start_date: date,
        number_of_payments: int,
        payment_amount: Decimal,
    ) -> BulkTransactionsResult:
        """Backfill ledger entries for historical payments.

        Creates one expense per month starting at ``start_date``. The EMI's
        paid count and balance are left untouched; use bulk_update for that.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
            InvalidStateError: If the EMI is not active
            ValidationError: If the payment count or amount is out of range
        """
        if start_date is None:
            raise ValidationError("Please provide a valid start date", field="startDate")
        if not 1 <= number_of_payments <= MAX_BULK_PAYMENTS:
            raise ValidationError(
                f"Number of payments must be between 1 and {MAX_BULK_PAYMENTS}",
                field="numberOfPayments",
            )
        payment_amount = _validate_non_negative_amount(
            payment_amount, "paymentAmount", "Payment amount"
        )

        emi = self._require_owned(emi_id, user_id)
        if not emi.is_active:
            raise InvalidStateError(inactive_emi("add transactions"))

        transactions = []
        for i in range(number_of_payments):
            installment = i + 1
            payment_date = amortization.add_months(start_date, i)
            transaction_id = self.db.create_transaction(
                user_id=user_id,
                transaction_type=TransactionType.EXPENSE,
                amount=payment_amount,
                description=f"{payment_description(emi.name)} (Installment {installment})",
                date=payment_date,
                payment_method=PaymentMethod.BANK_TRANSFER,
                notes=(
                    f"Historical EMI payment for {emi.name} - "
                    f"Installment {installment} of {number_of_payments}"
                ),
                recurring=Recurring(
                    is_recurring=True,
                    frequency=RecurringFrequency.MONTHLY,
                    next_due_date=amortization.add_months(payment_date, 1),
                ),
                emi_id=emi.id,
            )
            transactions.append(self.db.get_transaction(transaction_id))

        logger.info(
            "Created %s historical transactions for EMI '%s' (id=%s)",
            number_of_payments,
            emi.name,
            emi.id,
        )
        return BulkTransactionsResult(
            emi=emi,
            transactions=transactions,
            total_amount=payment_amount * number_of_payments,
        )

    def bulk_update(
        self,
        user_id: str,
        emi_id: int,
        paid_installments: int,
        last_payment_date: date,
    ) -> Emi:
        """Set the paid installment count directly.

        The next due date becomes one month after ``last_payment_date``. When
        the count reaches the total the EMI completes with a zero balance and
        its next due date set to the end date.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
            InvalidStateError: If the EMI is not active
            ValidationError: If the count is negative or exceeds the total
        """
        if paid_installments is None or paid_installments < 0:
            raise ValidationError(
                "Paid installments must be a non-negative integer", field="paidInstallments"
            )
        if last_payment_date is None:
            raise ValidationError(
                "Please provide a valid last payment date", field="lastPaymentDate"
            )

        emi = self._require_owned(emi_id, user_id, action="update")
        if not emi.is_active:
            raise InvalidStateError(inactive_emi("update"))
        if emi.total_installments is not None and paid_installments > emi.total_installments:
            raise ValidationError(
                "Paid installments cannot exceed total installments", field="paidInstallments"
            )

        schedule = amortization.schedule_from_last_payment(
            payment_type=emi.payment_type,
            emi_amount=emi.emi_amount,
            total_installments=emi.total_installments,
            paid_installments=paid_installments,
            last_payment_date=last_payment_date,
            end_date=emi.end_date,
        )
        updated = replace(
            emi,
            paid_installments=schedule.paid_installments,
            remaining_amount=schedule.remaining_amount,
            next_due_date=schedule.next_due_date,
        )
        if schedule.completed:
            updated = replace(updated, status=EmiStatus.COMPLETED)
        logger.info(
            "Bulk-updated EMI '%s' (id=%s) to %s paid installments",
            emi.name,
            emi.id,
            paid_installments,
        )
        return self.db.save_emi(updated)

    def delete_emi(self, user_id: str, emi_id: int) -> None:
        """Delete an EMI. Its transactions are kept.

        Raises:
            NotFoundError: If the EMI doesn't exist
            UnauthorizedError: If the EMI belongs to another user
        """
        self._require_owned(emi_id, user_id, action="delete")
        self.db.delete_emi(emi_id)

    def get_summary(self, user_id: str) -> EmiSummary:
        """Aggregate counts and amounts over all of a user's EMIs."""
        emis = self.db.list_emis(user_id)
        active = [emi for emi in emis if emi.status == EmiStatus.ACTIVE]
        return EmiSummary(
            total=len(emis),
            active=len(active),
            completed=sum(1 for emi in emis if emi.status == EmiStatus.COMPLETED),
            defaulted=sum(1 for emi in emis if emi.status == EmiStatus.DEFAULTED),
            total_amount=sum(
                (emi.emi_amount * (emi.total_installments or 0) for emi in emis), Decimal("0")
            ),
            total_remaining=sum((emi.remaining_amount for emi in emis), Decimal("0")),
            total_paid=sum(
                (emi.emi_amount * emi.paid_installments for emi in emis), Decimal("0")
            ),
            monthly_emi=sum((emi.emi_amount for emi in active), Decimal("0")),
        )
