"""
Payments API endpoints

Payments are only created through the reservation payment workflow; this
router exposes them read-only.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool
import uuid

from dinebook.core.database import get_session
from dinebook.models.payment import Payment
from dinebook.schemas.payment import PaymentRead
from dinebook.services.records import get_or_raise

router = APIRouter()


@router.get("/{payment_id}", response_model=PaymentRead)
async def get_payment(
    payment_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Get payment by ID (the owning reservation's ID)"""
    def fetch():
        return PaymentRead.model_validate(get_or_raise(session, Payment, payment_id))

    return await run_in_threadpool(fetch)
