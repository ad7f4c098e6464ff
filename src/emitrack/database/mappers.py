"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so enum coercion and the flattened
recurring columns live in one place.
"""

from decimal import Decimal

from emitrack.domain import entities as domain
from emitrack.database.models import (
    EMI as ORMEmi,
    Transaction as ORMTransaction,
)


def emi_to_domain(orm_emi: ORMEmi) -> domain.Emi:
    """Convert SQLAlchemy EMI model to domain Emi entity."""
    return domain.Emi(
        id=orm_emi.id,
        user_id=orm_emi.user_id,
        name=orm_emi.name,
        type=domain.EmiType(orm_emi.type),
        payment_type=domain.PaymentType(orm_emi.payment_type),
        emi_amount=Decimal(orm_emi.emi_amount),
        total_installments=orm_emi.total_installments,
        paid_installments=orm_emi.paid_installments,
        remaining_amount=Decimal(orm_emi.remaining_amount),
        start_date=orm_emi.start_date,
        next_due_date=orm_emi.next_due_date,
        end_date=orm_emi.end_date,
        status=domain.EmiStatus(orm_emi.status),
        notes=orm_emi.notes,
        created_at=orm_emi.created_at,
        updated_at=orm_emi.updated_at,
    )


def apply_emi_fields(orm_emi: ORMEmi, emi: domain.Emi) -> None:
    """Copy the mutable fields of a domain Emi onto an ORM row."""
    orm_emi.name = emi.name
    orm_emi.type = emi.type.value
    orm_emi.payment_type = emi.payment_type.value
    orm_emi.emi_amount = emi.emi_amount
    orm_emi.total_installments = emi.total_installments
    orm_emi.paid_installments = emi.paid_installments
    orm_emi.remaining_amount = emi.remaining_amount
    orm_emi.start_date = emi.start_date
    orm_emi.next_due_date = emi.next_due_date
    orm_emi.end_date = emi.end_date
    orm_emi.status = emi.status.value
    orm_emi.notes = emi.notes


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        type=domain.TransactionType(orm_transaction.type),
        amount=Decimal(orm_transaction.amount),
        description=orm_transaction.description,
        date=orm_transaction.date,
        tags=list(orm_transaction.tags or []),
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        notes=orm_transaction.notes,
        recurring=domain.Recurring(
            is_recurring=orm_transaction.is_recurring,
            frequency=domain.RecurringFrequency(orm_transaction.recurring_frequency),
            next_due_date=orm_transaction.recurring_next_due_date,
        ),
        emi_id=orm_transaction.emi_id,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )
