"""Request bodies accepted by the HTTP API.

Field names are camelCase on the wire (``emiAmount``) and snake_case in
Python. Enumerations are validated by the domain services so that invalid
choices produce the same messages from every entry point.
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmiCreate(ApiModel):
    name: str = Field(..., description="EMI name, at least 2 characters")
    type: str = Field("other", description="EMI classification")
    payment_type: str = Field("emi", description="emi, full_payment or subscription")
    emi_amount: Optional[Decimal] = Field(None, ge=0)
    total_installments: Optional[int] = Field(None, ge=0)
    start_date: datetime.date
    notes: Optional[str] = Field(None, max_length=500)


class EmiUpdate(ApiModel):
    name: Optional[str] = None
    type: Optional[str] = None
    payment_type: Optional[str] = None
    emi_amount: Optional[Decimal] = Field(None, ge=0)
    total_installments: Optional[int] = Field(None, ge=0)
    paid_installments: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime.date] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class EmiPayment(ApiModel):
    amount: Decimal = Field(..., ge=0)
    date: datetime.date
    notes: Optional[str] = Field(None, max_length=500)


class BulkTransactionsRequest(ApiModel):
    start_date: datetime.date
    number_of_payments: int = Field(..., ge=1, le=60)
    payment_amount: Decimal = Field(..., ge=0)


class BulkUpdateRequest(ApiModel):
    paid_installments: int = Field(..., ge=0)
    last_payment_date: datetime.date


class RecurringIn(ApiModel):
    is_recurring: bool = False
    frequency: str = "monthly"
    next_due_date: Optional[datetime.date] = None


class TransactionCreate(ApiModel):
    type: str
    amount: Decimal = Field(..., ge=0)
    description: str = Field(..., max_length=200)
    date: Optional[datetime.date] = None
    tags: Optional[list[str]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    recurring: Optional[RecurringIn] = None


class TransactionUpdate(ApiModel):
    type: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=200)
    date: Optional[datetime.date] = None
    tags: Optional[list[str]] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    recurring: Optional[RecurringIn] = None
