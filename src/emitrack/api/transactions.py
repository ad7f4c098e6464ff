"""Transaction (ledger) endpoints."""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from emitrack.api.auth import protect
from emitrack.api.dependencies import get_transaction_service
from emitrack.api.schemas import RecurringIn, TransactionCreate, TransactionUpdate
from emitrack.api.serializers import pagination_to_json, transaction_to_json
from emitrack.domain.emi import coerce_enum
from emitrack.domain.entities import Recurring, RecurringFrequency
from emitrack.domain.transaction import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _to_recurring(recurring: Optional[RecurringIn]) -> Optional[Recurring]:
    if recurring is None:
        return None
    return Recurring(
        is_recurring=recurring.is_recurring,
        frequency=coerce_enum(RecurringFrequency, recurring.frequency, "recurring.frequency"),
        next_due_date=recurring.next_due_date,
    )


@router.get("")
def list_transactions(
    type: Optional[str] = None,
    start_date: Optional[datetime.date] = Query(None, alias="startDate"),
    end_date: Optional[datetime.date] = Query(None, alias="endDate"),
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = 1,
    limit: int = 10,
    user_id: str = Depends(protect),
    service: TransactionService = Depends(get_transaction_service),
):
    result = service.list_transactions(
        user_id,
        transaction_type=type,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [transaction_to_json(txn) for txn in result.items],
        "pagination": pagination_to_json(result),
    }


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: int,
    user_id: str = Depends(protect),
    service: TransactionService = Depends(get_transaction_service),
):
    txn = service.get_transaction(user_id, transaction_id)
    return {"success": True, "data": transaction_to_json(txn)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    user_id: str = Depends(protect),
    service: TransactionService = Depends(get_transaction_service),
):
    txn = service.create_transaction(
        user_id=user_id,
        transaction_type=payload.type,
        amount=payload.amount,
        description=payload.description,
        date=payload.date,
        tags=payload.tags,
        payment_method=payload.payment_method,
        notes=payload.notes,
        recurring=_to_recurring(payload.recurring),
    )
    return {"success": True, "data": transaction_to_json(txn)}


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    user_id: str = Depends(protect),
    service: TransactionService = Depends(get_transaction_service),
):
    txn = service.update_transaction(
        user_id,
        transaction_id,
        transaction_type=payload.type,
        amount=payload.amount,
        description=payload.description,
        date=payload.date,
        tags=payload.tags,
        payment_method=payload.payment_method,
        notes=payload.notes,
        recurring=_to_recurring(payload.recurring),
    )
    return {"success": True, "data": transaction_to_json(txn)}


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    user_id: str = Depends(protect),
    service: TransactionService = Depends(get_transaction_service),
):
    service.delete_transaction(user_id, transaction_id)
    return {"success": True, "data": {}}
