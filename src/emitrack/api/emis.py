"""EMI endpoints."""

from fastapi import APIRouter, Depends, status

from emitrack.api.auth import protect
from emitrack.api.dependencies import get_emi_service
from emitrack.api.schemas import (
    BulkTransactionsRequest,
    BulkUpdateRequest,
    EmiCreate,
    EmiPayment,
    EmiUpdate,
)
from emitrack.api.serializers import (
    bulk_transactions_to_json,
    emi_to_json,
    payment_to_json,
    summary_to_json,
)
from emitrack.domain.emi import EmiService

router = APIRouter(prefix="/emis", tags=["emis"])


@router.get("")
def list_emis(
    user_id: str = Depends(protect), service: EmiService = Depends(get_emi_service)
):
    emis = service.list_emis(user_id)
    return {"success": True, "data": [emi_to_json(emi) for emi in emis]}


# Declared before /{emi_id} so "summary" is not parsed as an id
@router.get("/summary")
def get_summary(
    user_id: str = Depends(protect), service: EmiService = Depends(get_emi_service)
):
    return {"success": True, "data": summary_to_json(service.get_summary(user_id))}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_emi(
    payload: EmiCreate,
    user_id: str = Depends(protect),
    service: EmiService = Depends(get_emi_service),
):
    emi = service.create_emi(
        user_id=user_id,
        name=payload.name,
        emi_type=payload.type,
        payment_type=payload.payment_type,
        emi_amount=payload.emi_amount,
        start_date=payload.start_date,
        total_installments=payload.total_installments,
        notes=payload.notes,
    )
    return {"success": True, "data": emi_to_json(emi)}


@router.get("/{emi_id}")
def get_emi(
    emi_id: int, user_id: str = Depends(protect), service: EmiService = Depends(get_emi_service)
):
    return {"success": True, "data": emi_to_json(service.get_emi(user_id, emi_id))}


@router.put("/{emi_id}")
def update_emi(
    emi_id: int,
    payload: EmiUpdate,
    user_id: str = Depends(protect),
    service: EmiService = Depends(get_emi_service),
):
    emi = service.update_emi(
        user_id,
        emi_id,
        name=payload.name,
        emi_type=payload.type,
        payment_type=payload.payment_type,
        emi_amount=payload.emi_amount,
        total_installments=payload.total_installments,
        paid_installments=payload.paid_installments,
        start_date=payload.start_date,
        status=payload.status,
        notes=payload.notes,
    )
    return {"success": True, "data": emi_to_json(emi)}


@router.post("/{emi_id}/pay")
def pay_emi(
    emi_id: int,
    payload: EmiPayment,
    user_id: str = Depends(protect),
    service: EmiService = Depends(get_emi_service),
):
    result = service.record_payment(
        user_id, emi_id, amount=payload.amount, payment_date=payload.date, notes=payload.notes
    )
    return {
        "success": True,
        "message": "EMI payment recorded successfully",
        "data": payment_to_json(result),
    }


@router.post("/{emi_id}/bulk-transactions")
def create_bulk_transactions(
    emi_id: int,
    payload: BulkTransactionsRequest,
    user_id: str = Depends(protect),
    service: EmiService = Depends(get_emi_service),
):
    result = service.create_bulk_transactions(
        user_id,
        emi_id,
        start_date=payload.start_date,
        number_of_payments=payload.number_of_payments,
        payment_amount=payload.payment_amount,
    )
    return {
        "success": True,
        "message": (
            f"Successfully created {payload.number_of_payments} transaction records "
            f"for {result.emi.name}"
        ),
        "data": bulk_transactions_to_json(result),
    }


@router.put("/{emi_id}/bulk-update")
def bulk_update_emi(
    emi_id: int,
    payload: BulkUpdateRequest,
    user_id: str = Depends(protect),
    service: EmiService = Depends(get_emi_service),
):
    emi = service.bulk_update(
        user_id,
        emi_id,
        paid_installments=payload.paid_installments,
        last_payment_date=payload.last_payment_date,
    )
    return {
        "success": True,
        "message": "EMI updated successfully with bulk payment information",
        "data": emi_to_json(emi),
    }


@router.delete("/{emi_id}")
def delete_emi(
    emi_id: int, user_id: str = Depends(protect), service: EmiService = Depends(get_emi_service)
):
    service.delete_emi(user_id, emi_id)
    return {"success": True, "message": "EMI deleted successfully"}
