"""
Test configuration for pytest
"""

import pytest
import os
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["ENVIRONMENT"] = "test"

from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, select

import dinebook.models  # noqa: F401
from dinebook.core.database import get_session
from dinebook.core.events import event_bus
from dinebook.core.locks import KeyedLock
from dinebook.models import Diner, Payment, Reservation, ReservationStatus, ReservationTableLink, Table
from dinebook.models.payment import CENTS
from dinebook.services.reservation_lifecycle import ReservationLifecycle


# One shared in-memory SQLite connection for the test session and the app
test_engine = create_engine(
    "sqlite://",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def lifecycle(db: Session) -> ReservationLifecycle:
    """Lifecycle service with its own lock registry"""
    return ReservationLifecycle(db, locks=KeyedLock())


@pytest.fixture
def test_diner(db: Session) -> Diner:
    """Create a test diner"""
    diner = Diner(fname="Ada", lname="Lovelace", email="ada@example.com", phone="555-0100")
    db.add(diner)
    db.commit()
    db.refresh(diner)
    return diner


@pytest.fixture
def test_tables(db: Session) -> list[Table]:
    """Create three test tables"""
    tables = [
        Table(name="T1", capacity=2),
        Table(name="T2", capacity=2),
        Table(name="T3", capacity=6),
    ]
    for table in tables:
        db.add(table)
    db.commit()
    for table in tables:
        db.refresh(table)
    return tables


@pytest.fixture
def test_reservation(lifecycle: ReservationLifecycle, test_diner: Diner) -> Reservation:
    """Book a reservation for four guests"""
    return lifecycle.book(
        diner_id=test_diner.id,
        guests_count=4,
        date_reserved=datetime.utcnow() + timedelta(days=1),
    )


@pytest.fixture
def pending_reservation(
    lifecycle: ReservationLifecycle,
    test_reservation: Reservation,
    test_tables: list[Table],
) -> Reservation:
    """Reservation with T1 and T2 assigned"""
    return lifecycle.assign_tables(test_reservation.id, [test_tables[0].id, test_tables[1].id])


@pytest.fixture
def check_invariants(db: Session):
    """Return a callable asserting the cross-record counters are consistent"""

    def check():
        db.expire_all()
        links = db.exec(select(ReservationTableLink)).all()

        for reservation in db.exec(select(Reservation)).all():
            table_ids = {link.table_id for link in links if link.reservation_id == reservation.id}
            assert reservation.table_count == len(table_ids)
            assert {table.id for table in reservation.tables} == table_ids

            payment = db.get(Payment, reservation.id)
            if payment is not None:
                assert reservation.payment_id == payment.id
                assert reservation.status == ReservationStatus.CONFIRMED
                assert payment.total_amount == payment.guests_count * payment.charge_per_head
                total = payment.total_amount
                expected_fee = (total - total * payment.deposit_percentage).quantize(CENTS, rounding=ROUND_HALF_UP)
                assert payment.deposit_fee == expected_fee
            else:
                assert reservation.payment_id is None
                assert reservation.status != ReservationStatus.CONFIRMED

            if reservation.status == ReservationStatus.PENDING:
                assert reservation.table_count > 0

            assert reservation in reservation.diner.reservations

        for table in db.exec(select(Table)).all():
            assert table.reservation_count == len([link for link in links if link.table_id == table.id])
            assert table.reservation_count == len(table.reservations)

        for diner in db.exec(select(Diner)).all():
            assert diner.reservation_count == len(diner.reservations)

    return check


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Drop subscribers left behind by a test"""
    yield
    event_bus.clear_subscribers()


@pytest.fixture
async def client(db: Session):
    """Create test client backed by the test database"""
    from dinebook.main import app

    def override_get_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
