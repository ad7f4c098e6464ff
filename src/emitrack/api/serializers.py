"""JSON representations of domain entities for API responses."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from emitrack.domain.entities import (
    BulkTransactionsResult,
    Emi,
    EmiSummary,
    PaymentResult,
    Transaction,
    TransactionPage,
)


def _money(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def emi_to_json(emi: Emi) -> dict[str, Any]:
    """Serialize an EMI, including its derived total amount."""
    return {
        "id": emi.id,
        "user": emi.user_id,
        "name": emi.name,
        "type": emi.type.value,
        "paymentType": emi.payment_type.value,
        "emiAmount": _money(emi.emi_amount),
        "totalInstallments": emi.total_installments,
        "paidInstallments": emi.paid_installments,
        "remainingAmount": _money(emi.remaining_amount),
        "totalAmount": _money(emi.total_amount),
        "startDate": _iso(emi.start_date),
        "nextDueDate": _iso(emi.next_due_date),
        "endDate": _iso(emi.end_date),
        "status": emi.status.value,
        "notes": emi.notes,
        "createdAt": _iso(emi.created_at),
        "updatedAt": _iso(emi.updated_at),
    }


def transaction_to_json(txn: Transaction) -> dict[str, Any]:
    """Serialize a ledger transaction."""
    return {
        "id": txn.id,
        "user": txn.user_id,
        "type": txn.type.value,
        "amount": _money(txn.amount),
        "description": txn.description,
        "date": _iso(txn.date),
        "tags": list(txn.tags),
        "paymentMethod": txn.payment_method.value,
        "notes": txn.notes,
        "recurring": {
            "isRecurring": txn.recurring.is_recurring,
            "frequency": txn.recurring.frequency.value,
            "nextDueDate": _iso(txn.recurring.next_due_date),
        },
        "emi": txn.emi_id,
        "createdAt": _iso(txn.created_at),
        "updatedAt": _iso(txn.updated_at),
    }


def summary_to_json(summary: EmiSummary) -> dict[str, Any]:
    return {
        "total": summary.total,
        "active": summary.active,
        "completed": summary.completed,
        "defaulted": summary.defaulted,
        "totalAmount": _money(summary.total_amount),
        "totalRemaining": _money(summary.total_remaining),
        "totalPaid": _money(summary.total_paid),
        "monthlyEMI": _money(summary.monthly_emi),
    }


def payment_to_json(result: PaymentResult) -> dict[str, Any]:
    return {
        "emi": emi_to_json(result.emi),
        "transaction": transaction_to_json(result.transaction),
    }


def bulk_transactions_to_json(result: BulkTransactionsResult) -> dict[str, Any]:
    return {
        "emi": emi_to_json(result.emi),
        "transactions": [transaction_to_json(txn) for txn in result.transactions],
        "totalAmount": _money(result.total_amount),
    }


def pagination_to_json(page: TransactionPage) -> dict[str, Any]:
    return {
        "currentPage": page.current_page,
        "totalPages": page.total_pages,
        "totalItems": page.total_items,
        "itemsPerPage": page.items_per_page,
    }
