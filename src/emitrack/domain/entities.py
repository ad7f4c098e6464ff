"""Domain model entities for emitrack.

These are pure data classes representing business concepts, independent of
database schema. Services produce modified copies with ``dataclasses.replace``
and hand them back to the database layer to persist.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EmiType(str, Enum):
    """Canonical EMI classification shared by validation and storage."""

    PERSONAL_LOAN = "personal_loan"
    MOBILE_EMI = "mobile_emi"
    LAPTOP_EMI = "laptop_emi"
    SAVINGS_EMI = "savings_emi"
    CAR_LOAN = "car_loan"
    HOME_LOAN = "home_loan"
    BUSINESS_LOAN = "business_loan"
    EDUCATION_LOAN = "education_loan"
    CREDIT_CARD = "credit_card"
    APPLIANCE_EMI = "appliance_emi"
    FURNITURE_EMI = "furniture_emi"
    BIKE_EMI = "bike_emi"
    CHEETU = "cheetu"
    INCOME_EMI = "income_emi"
    RENT = "rent"
    SUBSCRIPTION = "subscription"
    OTHER = "other"


class PaymentType(str, Enum):
    """How an EMI is paid off."""

    EMI = "emi"
    FULL_PAYMENT = "full_payment"
    SUBSCRIPTION = "subscription"


class EmiStatus(str, Enum):
    """EMI lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class TransactionType(str, Enum):
    """Ledger entry direction."""

    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """How a transaction was paid."""

    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    DIGITAL_WALLET = "digital_wallet"
    OTHER = "other"


class RecurringFrequency(str, Enum):
    """Recurrence period of a recurring transaction."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Emi:
    """EMI domain entity: one financing obligation owned by a user."""

    id: int
    user_id: str
    name: str
    type: EmiType
    payment_type: PaymentType
    emi_amount: Decimal
    total_installments: Optional[int]
    paid_installments: int
    remaining_amount: Decimal
    start_date: date
    next_due_date: Optional[date]
    end_date: Optional[date]
    status: EmiStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def total_amount(self) -> Decimal:
        """Full obligation: one charge for full payments, otherwise amount x installments."""
        if self.payment_type == PaymentType.FULL_PAYMENT:
            return self.emi_amount
        return self.emi_amount * (self.total_installments or 0)

    @property
    def is_active(self) -> bool:
        return self.status == EmiStatus.ACTIVE


@dataclass(frozen=True)
class Recurring:
    """Recurrence settings attached to a transaction."""

    is_recurring: bool = False
    frequency: RecurringFrequency = RecurringFrequency.MONTHLY
    next_due_date: Optional[date] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: str
    type: TransactionType
    amount: Decimal
    description: str
    date: date
    tags: list[str]
    payment_method: PaymentMethod
    notes: Optional[str]
    recurring: Recurring
    emi_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of recording a single EMI payment."""

    emi: Emi
    transaction: Transaction


@dataclass(frozen=True)
class BulkTransactionsResult:
    """Outcome of backfilling historical EMI payments."""

    emi: Emi
    transactions: list[Transaction]
    total_amount: Decimal


@dataclass(frozen=True)
class EmiSummary:
    """Aggregate statistics over all of a user's EMIs."""

    total: int = 0
    active: int = 0
    completed: int = 0
    defaulted: int = 0
    total_amount: Decimal = Decimal("0")
    total_remaining: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    monthly_emi: Decimal = Decimal("0")


@dataclass(frozen=True)
class TransactionPage:
    """One page of a filtered transaction listing."""

    items: list[Transaction] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_items: int = 0
    items_per_page: int = 10
