"""
Schemas for reservations

The read models double as projections: each one only exposes the related
records a given endpoint populates.
"""

from pydantic import BaseModel, Field
from sqlmodel import SQLModel
from typing import List, Optional
from datetime import datetime
import uuid

from dinebook.models.reservation import ReservationStatus
from dinebook.schemas.diner import DinerSummary
from dinebook.schemas.payment import PaymentSummary
from dinebook.schemas.table import TableRead


class ReservationCreate(BaseModel):
    diner_id: uuid.UUID
    guests_count: int = Field(..., ge=1)
    date_reserved: datetime
    notes: Optional[str] = Field(default=None, max_length=1000)


class ReservationUpdate(BaseModel):
    """Booking details a caller may edit; lifecycle fields are not editable"""
    guests_count: Optional[int] = Field(default=None, ge=1)
    date_reserved: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        extra = "forbid"


class ReservationRead(SQLModel):
    id: uuid.UUID
    diner_id: uuid.UUID
    payment_id: Optional[uuid.UUID] = None
    guests_count: int
    table_count: int
    status: ReservationStatus
    date_reserved: datetime
    notes: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class ReservationWithDiner(ReservationRead):
    diner: Optional[DinerSummary] = None


class ReservationWithTables(ReservationWithDiner):
    tables: List[TableRead] = []


class ReservationWithPayment(ReservationWithDiner):
    payment: Optional[PaymentSummary] = None


class ReservationDetail(ReservationWithTables):
    payment: Optional[PaymentSummary] = None


class ReservationPage(SQLModel):
    docs: List[ReservationWithDiner]
    total: int
    page: int
    limit: int
    pages: int
