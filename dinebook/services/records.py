"""
Shared read/update helpers over the SQLModel session

Point lookups, relation population, paginated listing and whitelisted
field updates used by the API routers and the lifecycle workflows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar
import math
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select
import structlog

from dinebook.core.exceptions import InvalidParameterError, NotFoundError
from dinebook.models import Reservation

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

RESERVATION_RELATIONS = ("diner", "tables", "payment")


@dataclass
class Page:
    """One page of a listing, shaped like mongoose-paginate output"""
    docs: List[Any]
    total: int
    page: int
    limit: int
    pages: int = field(init=False)

    def __post_init__(self):
        self.pages = math.ceil(self.total / self.limit) if self.limit else 0


def get_or_raise(session: Session, model: Type[ModelT], record_id: uuid.UUID) -> ModelT:
    """Fetch a record by primary key or raise NotFoundError"""
    record = session.get(model, record_id)
    if record is None:
        raise NotFoundError(f"{model.__name__} {record_id} not found")
    return record


def fetch_reservation(
    session: Session,
    reservation_id: uuid.UUID,
    populate: Iterable[str] = RESERVATION_RELATIONS,
) -> Reservation:
    """Fetch a reservation with the requested relations eagerly loaded"""
    statement = (
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .execution_options(populate_existing=True)
    )
    for relation in populate:
        if relation not in RESERVATION_RELATIONS:
            raise ValueError(f"Unknown reservation relation: {relation}")
        statement = statement.options(selectinload(getattr(Reservation, relation)))

    reservation = session.exec(statement).first()
    if reservation is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return reservation


def parse_sort(model: Type[SQLModel], sort: Optional[str], allowed: Sequence[str], default: str):
    """
    Turn a sort string into an ORDER BY clause.

    ``"date_reserved"`` sorts ascending, ``"-date_reserved"`` descending.
    """
    sort = sort or default
    descending = sort.startswith("-")
    field_name = sort.lstrip("-")
    if field_name not in allowed:
        raise InvalidParameterError(
            f"Cannot sort by '{field_name}'; expected one of {', '.join(allowed)}"
        )
    column = getattr(model, field_name)
    return column.desc() if descending else column.asc()


def paginate(session: Session, statement, page: int, limit: int, order_by=None) -> Page:
    """Run a select statement one page at a time"""
    if page < 1:
        raise InvalidParameterError("page must be >= 1")
    if limit < 1:
        raise InvalidParameterError("limit must be >= 1")

    total = session.exec(
        select(func.count()).select_from(statement.order_by(None).subquery())
    ).one()

    if order_by is not None:
        statement = statement.order_by(order_by)
    docs = session.exec(statement.offset((page - 1) * limit).limit(limit)).all()

    return Page(docs=list(docs), total=total, page=page, limit=limit)


def update_fields(
    session: Session,
    record: ModelT,
    changes: Mapping[str, Any],
    allowed: Iterable[str],
) -> ModelT:
    """Apply whitelisted field changes to a record, commit and refresh it"""
    allowed = set(allowed)
    rejected = sorted(set(changes) - allowed)
    if rejected:
        raise InvalidParameterError(f"Fields cannot be updated: {', '.join(rejected)}")

    columns = type(record).__table__.columns
    required = sorted(
        key for key, value in changes.items()
        if value is None and key in columns and not columns[key].nullable
    )
    if required:
        raise InvalidParameterError(f"Fields cannot be null: {', '.join(required)}")

    for key, value in changes.items():
        setattr(record, key, value)

    if hasattr(record, "updated_at"):
        record.updated_at = datetime.utcnow()
    session.add(record)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise InvalidParameterError(f"{type(record).__name__} update rejected: {e.orig}") from e
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(record)

    logger.info(f"{type(record).__name__} updated: {record.id}", fields=sorted(changes))
    return record
