"""
Reservations API endpoints

Booking, table assignment, payment and removal go through
ReservationLifecycle; domain events are published once a workflow commits.
"""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool
from typing import List, Optional
import structlog
import uuid

from dinebook.api.common import page_limit
from dinebook.core.database import get_session
from dinebook.core.events import (
    ReservationConfirmed, ReservationCreated, ReservationRemoved,
    ReservationTablesAssigned, event_bus
)
from dinebook.models.reservation import Reservation
from dinebook.schemas.payment import PaymentCreate
from dinebook.schemas.reservation import (
    ReservationCreate,
    ReservationDetail,
    ReservationPage,
    ReservationUpdate,
    ReservationWithDiner,
    ReservationWithPayment,
    ReservationWithTables,
)
from dinebook.services.records import fetch_reservation, paginate, parse_sort, update_fields
from dinebook.services.reservation_lifecycle import RemovalAck, ReservationLifecycle

logger = structlog.get_logger(__name__)
router = APIRouter()

RESERVATION_SORT_FIELDS = ("date_reserved", "created_at", "guests_count", "status")
EDITABLE_FIELDS = ("guests_count", "date_reserved", "notes")


@router.post("/", response_model=ReservationWithDiner, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    session: Session = Depends(get_session)
):
    """Book a reservation for an existing diner"""
    def book():
        reservation = ReservationLifecycle(session).book(**reservation_data.model_dump())
        return ReservationWithDiner.model_validate(reservation)

    result = await run_in_threadpool(book)
    await event_bus.publish(ReservationCreated(
        reservation_id=result.id,
        diner_id=result.diner_id,
        guests_count=result.guests_count
    ))
    return result


@router.get("/", response_model=ReservationPage)
async def list_reservations(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = Query(None, description="Field to sort by, prefix with '-' for descending"),
    session: Session = Depends(get_session)
):
    """Fetch all reservations with pagination, newest date first"""
    def fetch():
        order_by = parse_sort(Reservation, sort, RESERVATION_SORT_FIELDS, default="-date_reserved")
        query = select(Reservation).options(selectinload(Reservation.diner))
        result = paginate(session, query, page, page_limit(limit), order_by=order_by)
        logger.info(f"Found {len(result.docs)} reservations")
        return ReservationPage.model_validate(result)

    return await run_in_threadpool(fetch)


@router.get("/{reservation_id}", response_model=ReservationDetail)
async def get_reservation(
    reservation_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Fetch a reservation with its diner, tables and payment"""
    def fetch():
        reservation = fetch_reservation(session, reservation_id)
        logger.info(f"Fetched one reservation id: {reservation.id}")
        return ReservationDetail.model_validate(reservation)

    return await run_in_threadpool(fetch)


@router.put("/{reservation_id}", response_model=ReservationWithDiner)
async def update_reservation(
    reservation_id: uuid.UUID,
    reservation_data: ReservationUpdate,
    session: Session = Depends(get_session)
):
    """Edit booking details of a reservation"""
    def update():
        reservation = fetch_reservation(session, reservation_id, populate=())
        changes = reservation_data.model_dump(exclude_unset=True)
        update_fields(session, reservation, changes, allowed=EDITABLE_FIELDS)
        reservation = fetch_reservation(session, reservation_id, populate=("diner",))
        return ReservationWithDiner.model_validate(reservation)

    return await run_in_threadpool(update)


@router.delete("/{reservation_id}", response_model=RemovalAck)
async def delete_reservation(
    reservation_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Remove a reservation and release its diner, tables and payment"""
    ack = await run_in_threadpool(ReservationLifecycle(session).remove, reservation_id)
    await event_bus.publish(ReservationRemoved(
        reservation_id=ack.reservation_id,
        diner_id=ack.diner_id,
        released_table_ids=ack.released_table_ids
    ))
    return ack


@router.put("/{reservation_id}/tables", response_model=ReservationWithTables)
async def update_reservation_tables(
    reservation_id: uuid.UUID,
    table_ids: List[uuid.UUID] = Body(..., description="Ids of the tables to assign"),
    session: Session = Depends(get_session)
):
    """Assign tables to a reservation and mark it pending"""
    def assign():
        reservation = ReservationLifecycle(session).assign_tables(reservation_id, table_ids)
        return ReservationWithTables.model_validate(reservation)

    result = await run_in_threadpool(assign)
    await event_bus.publish(ReservationTablesAssigned(
        reservation_id=result.id,
        table_ids=[table.id for table in result.tables],
        table_count=result.table_count
    ))
    return result


@router.post(
    "/{reservation_id}/payment",
    response_model=ReservationWithPayment,
    status_code=status.HTTP_201_CREATED
)
async def create_reservation_payment(
    reservation_id: uuid.UUID,
    payment_data: PaymentCreate,
    session: Session = Depends(get_session)
):
    """Capture the payment for a pending reservation and confirm it"""
    def capture():
        reservation = ReservationLifecycle(session).capture_payment(
            reservation_id,
            **payment_data.model_dump(exclude_none=True)
        )
        return ReservationWithPayment.model_validate(reservation)

    result = await run_in_threadpool(capture)
    await event_bus.publish(ReservationConfirmed(
        reservation_id=result.id,
        payment_id=result.payment.id,
        total_amount=float(result.payment.total_amount),
        deposit_fee=float(result.payment.deposit_fee)
    ))
    return result
