"""
Schemas for reservation payments
"""

from pydantic import BaseModel, Field
from sqlmodel import SQLModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid

from dinebook.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    """
    Payment capture request.

    Totals and the guests count are computed server-side, so they are not
    accepted here.
    """
    charge_per_head: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    deposit_percentage: Decimal = Field(..., ge=0, le=1, max_digits=5, decimal_places=4)
    date_of_payment: Optional[datetime] = None
    method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    class Config:
        extra = "forbid"


class PaymentSummary(SQLModel):
    """Payment embedded in reservation responses"""
    id: uuid.UUID
    charge_per_head: Decimal
    deposit_percentage: Decimal
    total_amount: Decimal
    deposit_fee: Decimal
    method: PaymentMethod
    notes: Optional[str] = None
    date_of_payment: datetime


class PaymentRead(PaymentSummary):
    """Payment response model including the guests snapshot"""
    guests_count: int
    created_at: datetime
