"""
Diners API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool
from typing import Optional
import structlog
import uuid

from dinebook.api.common import page_limit
from dinebook.core.database import get_session
from dinebook.models.diner import Diner
from dinebook.schemas.diner import DinerCreate, DinerPage, DinerRead, DinerUpdate
from dinebook.services.records import get_or_raise, paginate, parse_sort, update_fields

logger = structlog.get_logger(__name__)
router = APIRouter()

DINER_SORT_FIELDS = ("fname", "lname", "email", "date_registered", "reservation_count")


@router.post("/", response_model=DinerRead, status_code=status.HTTP_201_CREATED)
async def create_diner(
    diner_data: DinerCreate,
    session: Session = Depends(get_session)
):
    """Register a new diner"""
    def create():
        diner = Diner(**diner_data.model_dump())
        session.add(diner)
        session.commit()
        session.refresh(diner)
        logger.info(f"Diner created: {diner.id}")
        return DinerRead.model_validate(diner)

    return await run_in_threadpool(create)


@router.get("/", response_model=DinerPage)
async def list_diners(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = Query(None, description="Field to sort by, prefix with '-' for descending"),
    session: Session = Depends(get_session)
):
    """List diners with pagination"""
    def fetch():
        order_by = parse_sort(Diner, sort, DINER_SORT_FIELDS, default="lname")
        result = paginate(session, select(Diner), page, page_limit(limit), order_by=order_by)
        logger.info(f"Found {len(result.docs)} diners")
        return DinerPage.model_validate(result)

    return await run_in_threadpool(fetch)


@router.get("/{diner_id}", response_model=DinerRead)
async def get_diner(
    diner_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Get diner by ID"""
    def fetch():
        return DinerRead.model_validate(get_or_raise(session, Diner, diner_id))

    return await run_in_threadpool(fetch)


@router.put("/{diner_id}", response_model=DinerRead)
async def update_diner(
    diner_id: uuid.UUID,
    diner_data: DinerUpdate,
    session: Session = Depends(get_session)
):
    """Update diner contact details"""
    def update():
        diner = get_or_raise(session, Diner, diner_id)
        changes = diner_data.model_dump(exclude_unset=True)
        diner = update_fields(session, diner, changes, allowed=DinerUpdate.model_fields.keys())
        return DinerRead.model_validate(diner)

    return await run_in_threadpool(update)
