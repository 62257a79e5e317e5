"""
Schemas module
"""

from dinebook.schemas.diner import DinerCreate, DinerPage, DinerRead, DinerSummary, DinerUpdate
from dinebook.schemas.payment import PaymentCreate, PaymentRead, PaymentSummary
from dinebook.schemas.reservation import (
    ReservationCreate,
    ReservationDetail,
    ReservationPage,
    ReservationRead,
    ReservationUpdate,
    ReservationWithDiner,
    ReservationWithPayment,
    ReservationWithTables,
)
from dinebook.schemas.table import TableCreate, TablePage, TableRead, TableUpdate

__all__ = [
    "DinerCreate",
    "DinerPage",
    "DinerRead",
    "DinerSummary",
    "DinerUpdate",
    "PaymentCreate",
    "PaymentRead",
    "PaymentSummary",
    "ReservationCreate",
    "ReservationDetail",
    "ReservationPage",
    "ReservationRead",
    "ReservationUpdate",
    "ReservationWithDiner",
    "ReservationWithPayment",
    "ReservationWithTables",
    "TableCreate",
    "TablePage",
    "TableRead",
    "TableUpdate",
]
