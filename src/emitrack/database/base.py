"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from emitrack.domain.entities import (
    Emi,
    EmiStatus,
    EmiType,
    PaymentMethod,
    PaymentType,
    Recurring,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for emitrack."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # EMI operations
    @abstractmethod
    def create_emi(
        self,
        user_id: str,
        name: str,
        emi_type: EmiType,
        payment_type: PaymentType,
        emi_amount: Decimal,
        total_installments: Optional[int],
        paid_installments: int,
        remaining_amount: Decimal,
        start_date: date,
        next_due_date: Optional[date],
        end_date: Optional[date],
        status: EmiStatus = EmiStatus.ACTIVE,
        notes: Optional[str] = None,
    ) -> int:
        """Create an EMI. Returns EMI ID."""
        pass

    @abstractmethod
    def get_emi(self, emi_id: int) -> Optional[Emi]:
        """Get EMI by ID."""
        pass

    @abstractmethod
    def list_emis(
        self,
        user_id: str,
        status: Optional[EmiStatus] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None,
    ) -> list[Emi]:
        """List a user's EMIs ordered by next due date.

        Args:
            user_id: Owning user
            status: Optional status filter
            due_from: Optional inclusive lower bound on next due date
            due_to: Optional inclusive upper bound on next due date
        """
        pass

    @abstractmethod
    def save_emi(self, emi: Emi) -> Emi:
        """Persist every mutable field of an existing EMI. Returns the stored EMI."""
        pass

    @abstractmethod
    def delete_emi(self, emi_id: int) -> None:
        """Delete an EMI, unlinking (not deleting) its transactions."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
        date: date,
        tags: Optional[list[str]] = None,
        payment_method: PaymentMethod = PaymentMethod.OTHER,
        notes: Optional[str] = None,
        recurring: Optional[Recurring] = None,
        emi_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        transaction_type: Optional[TransactionType] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        date: Optional[date] = None,
        tags: Optional[list[str]] = None,
        payment_method: Optional[PaymentMethod] = None,
        notes: Optional[str] = None,
        recurring: Optional[Recurring] = None,
    ) -> None:
        """Update transaction fields. Fields left as None are not changed."""
        pass

    @abstractmethod
    def link_transaction_to_emi(self, transaction_id: int, emi_id: Optional[int]) -> None:
        """Set or clear the EMI a transaction pays into."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: str = "date",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List a user's transactions with optional filters.

        Args:
            user_id: Owning user
            transaction_type: Optional income/expense filter
            start_date: Optional start date filter
            end_date: Optional end date filter
            sort_by: Column to sort by (date, amount or created_at)
            descending: Sort direction
            limit: Maximum number of rows, None for all
            offset: Number of rows to skip
        """
        pass

    @abstractmethod
    def count_transactions(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Count a user's transactions matching the same filters as list_transactions."""
        pass
