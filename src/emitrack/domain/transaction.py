"""Transaction (ledger) domain service."""

import math
from datetime import date
from decimal import Decimal
from typing import Optional

from emitrack.database.base import Database
from emitrack.domain.emi import coerce_enum, validate_notes
from emitrack.domain.entities import (
    PaymentMethod,
    Recurring,
    Transaction as TransactionEntity,
    TransactionPage,
    TransactionType,
)
from emitrack.domain.errors import (
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    not_owner,
    transaction_not_found,
)
from emitrack.domain.reconciler import EmiReconciler

DESCRIPTION_MAX_LENGTH = 200
MAX_PAGE_SIZE = 100
SORT_FIELDS = ("date", "amount", "created_at")


def _validate_description(description: Optional[str]) -> str:
    description = (description or "").strip()
    if not description or len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description is required and must be less than {DESCRIPTION_MAX_LENGTH} characters",
            field="description",
        )
    return description


def _validate_amount(amount: Decimal) -> Decimal:
    amount = Decimal(amount)
    if amount < 0:
        raise ValidationError("Amount must be a positive number", field="amount")
    return amount


def _clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    return [tag.strip() for tag in tags if tag and tag.strip()]


class TransactionService:
    """Service for managing ledger transactions."""

    def __init__(self, db: Database, reconciler: Optional[EmiReconciler] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            reconciler: EMI reconciler run after writes (defaults to one on the same database)
        """
        self.db = db
        self.reconciler = reconciler or EmiReconciler(db)

    def _require_owned(
        self, transaction_id: int, user_id: str, action: str = "access"
    ) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.user_id != user_id:
            raise UnauthorizedError(not_owner("transaction", action))
        return txn

    def create_transaction(
        self,
        user_id: str,
        transaction_type: TransactionType | str,
        amount: Decimal,
        description: str,
        date: Optional[date] = None,
        tags: Optional[list[str]] = None,
        payment_method: Optional[PaymentMethod | str] = None,
        notes: Optional[str] = None,
        recurring: Optional[Recurring] = None,
    ) -> TransactionEntity:
        """Create a transaction.

        Expenses whose description names an EMI also record an installment
        on that EMI. That step never fails the write.

        Args:
            user_id: Owning user
            transaction_type: income or expense
            amount: Non-negative amount
            description: Free text, 1 to 200 characters
            date: Transaction date (defaults to today)
            tags: Optional tags
            payment_method: Optional payment method (defaults to other)
            notes: Optional notes
            recurring: Optional recurrence settings

        Returns:
            The created transaction (re-read after reconciliation)

        Raises:
            ValidationError: If a field is invalid
        """
        transaction_type = coerce_enum(TransactionType, transaction_type, "type")
        amount = _validate_amount(amount)
        description = _validate_description(description)
        method = (
            coerce_enum(PaymentMethod, payment_method, "paymentMethod")
            if payment_method is not None
            else PaymentMethod.OTHER
        )

        transaction_id = self.db.create_transaction(
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            date=date or date_today(),
            tags=_clean_tags(tags),
            payment_method=method,
            notes=validate_notes(notes),
            recurring=recurring,
        )
        txn = self.db.get_transaction(transaction_id)
        if self.reconciler.reconcile(txn) is not None:
            txn = self.db.get_transaction(transaction_id)
        return txn

    def get_transaction(self, user_id: str, transaction_id: int) -> TransactionEntity:
        """Get a transaction owned by the user.

        Raises:
            NotFoundError: If the transaction doesn't exist
            UnauthorizedError: If the transaction belongs to another user
        """
        return self._require_owned(transaction_id, user_id)

    def update_transaction(
        self,
        user_id: str,
        transaction_id: int,
        transaction_type: Optional[TransactionType | str] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        date: Optional[date] = None,
        tags: Optional[list[str]] = None,
        payment_method: Optional[PaymentMethod | str] = None,
        notes: Optional[str] = None,
        recurring: Optional[Recurring] = None,
    ) -> TransactionEntity:
        """Update transaction fields.

        Updates only the fields that are provided. A changed description on an
        expense that is not yet linked to an EMI is reconciled again.

        Raises:
            NotFoundError: If the transaction doesn't exist
            UnauthorizedError: If the transaction belongs to another user
            ValidationError: If a field is invalid
        """
        old = self._require_owned(transaction_id, user_id, action="update")

        if transaction_type is not None:
            transaction_type = coerce_enum(TransactionType, transaction_type, "type")
        if amount is not None:
            amount = _validate_amount(amount)
        if description is not None:
            description = _validate_description(description)
        if payment_method is not None:
            payment_method = coerce_enum(PaymentMethod, payment_method, "paymentMethod")

        self.db.update_transaction(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            date=date,
            tags=_clean_tags(tags),
            payment_method=payment_method,
            notes=validate_notes(notes),
            recurring=recurring,
        )
        txn = self.db.get_transaction(transaction_id)

        if description is not None and description != old.description:
            if self.reconciler.reconcile(txn) is not None:
                txn = self.db.get_transaction(transaction_id)
        return txn

    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        """Delete a transaction. Any EMI it paid into is left as is.

        Raises:
            NotFoundError: If the transaction doesn't exist
            UnauthorizedError: If the transaction belongs to another user
        """
        self._require_owned(transaction_id, user_id, action="delete")
        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType | str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: str = "date",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> TransactionPage:
        """List one page of a user's transactions.

        Args:
            user_id: Owning user
            transaction_type: Optional income/expense filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            sort_by: date, amount or created_at
            sort_order: asc or desc
            page: 1-based page number
            limit: Page size, 1 to 100

        Returns:
            TransactionPage with items and pagination metadata
        """
        if transaction_type is not None:
            transaction_type = coerce_enum(TransactionType, transaction_type, "type")
        if sort_by not in SORT_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{sort_by}'. Must be one of: {', '.join(SORT_FIELDS)}",
                field="sortBy",
            )
        if sort_order not in ("asc", "desc"):
            raise ValidationError("Sort order must be asc or desc", field="sortOrder")
        if page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"Limit must be between 1 and {MAX_PAGE_SIZE}", field="limit"
            )

        items = self.db.list_transactions(
            user_id,
            transaction_type=transaction_type,
            start_date=start_date,
            end_date=end_date,
            sort_by=sort_by,
            descending=sort_order == "desc",
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = self.db.count_transactions(
            user_id, transaction_type=transaction_type, start_date=start_date, end_date=end_date
        )
        return TransactionPage(
            items=items,
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_items=total,
            items_per_page=limit,
        )


def date_today() -> date:
    """Return today's date."""
    return date.today()
