"""
Tables API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool
from typing import Optional
import structlog
import uuid

from dinebook.api.common import page_limit
from dinebook.core.database import get_session
from dinebook.models.table import Table
from dinebook.schemas.table import TableCreate, TablePage, TableRead, TableUpdate
from dinebook.services.records import get_or_raise, paginate, parse_sort, update_fields

logger = structlog.get_logger(__name__)
router = APIRouter()

TABLE_SORT_FIELDS = ("name", "capacity", "reservation_count", "created_at")


@router.post("/", response_model=TableRead, status_code=status.HTTP_201_CREATED)
async def create_table(
    table_data: TableCreate,
    session: Session = Depends(get_session)
):
    """Create a new table"""
    def create():
        new_table = Table(**table_data.model_dump())
        session.add(new_table)
        session.commit()
        session.refresh(new_table)
        logger.info(f"Table created: {new_table.id}")
        return TableRead.model_validate(new_table)

    return await run_in_threadpool(create)


@router.get("/", response_model=TablePage)
async def list_tables(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = None,
    active_only: bool = False,
    session: Session = Depends(get_session)
):
    """List tables with pagination"""
    def fetch():
        query = select(Table)
        if active_only:
            query = query.where(Table.is_active == True)  # noqa: E712
        order_by = parse_sort(Table, sort, TABLE_SORT_FIELDS, default="name")
        return TablePage.model_validate(paginate(session, query, page, page_limit(limit), order_by=order_by))

    return await run_in_threadpool(fetch)


@router.get("/{table_id}", response_model=TableRead)
async def get_table(
    table_id: uuid.UUID,
    session: Session = Depends(get_session)
):
    """Get table by ID"""
    def fetch():
        return TableRead.model_validate(get_or_raise(session, Table, table_id))

    return await run_in_threadpool(fetch)


@router.put("/{table_id}", response_model=TableRead)
async def update_table(
    table_id: uuid.UUID,
    table_data: TableUpdate,
    session: Session = Depends(get_session)
):
    """Update table"""
    def update():
        table = get_or_raise(session, Table, table_id)
        changes = table_data.model_dump(exclude_unset=True)
        table = update_fields(session, table, changes, allowed=TableUpdate.model_fields.keys())
        return TableRead.model_validate(table)

    return await run_in_threadpool(update)
