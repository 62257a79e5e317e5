"""
Reservation lifecycle workflows

Each workflow touches several records (reservation, tables, diner, payment)
in a fixed order. All steps of one workflow share a single database
transaction and run while holding the reservation's workflow lock, so a
failing step leaves no partial state behind and two workflows on the same
reservation never interleave. Denormalized counters are recomputed from the
underlying link and foreign-key rows, never incremented.
"""

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Iterator, List, Optional
import uuid

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, col, select
import structlog

from dinebook.core.exceptions import (
    DomainError, InvalidParameterError, InvalidStateError, NotFoundError, PartialFailureError
)
from dinebook.core.locks import KeyedLock, reservation_locks
from dinebook.models import (
    Diner, Payment, PaymentMethod, Reservation, ReservationTableLink, Table
)
from dinebook.models.payment import CENTS, PERCENTAGE_PLACES
from dinebook.services.records import fetch_reservation, get_or_raise

logger = structlog.get_logger(__name__)

# Caller-supplied payment fields besides the pricing parameters
PAYMENT_EXTRA_FIELDS = {"method", "notes"}


class RemovalAck(SQLModel):
    """Result of the reservation removal workflow"""
    reservation_id: uuid.UUID
    diner_id: Optional[uuid.UUID] = None
    released_table_ids: List[uuid.UUID] = []
    payment_removed: bool = False
    deleted_count: int = 1


class _WorkflowRun:
    """Tracks the steps of one workflow and rolls back on failure"""

    def __init__(self, session: Session, name: str, reservation_id: uuid.UUID):
        self.session = session
        self.reservation_id = reservation_id
        self.completed: List[str] = []
        self.log = logger.bind(workflow=name, reservation_id=str(reservation_id))

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        try:
            yield
            self.session.flush()
        except DomainError:
            self.session.rollback()
            raise
        except ValueError as e:
            self.session.rollback()
            raise InvalidStateError(str(e)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            self.log.error("Workflow step failed", step=name, completed=self.completed, error=str(e))
            if not self.completed:
                raise
            raise PartialFailureError(name, self.reservation_id, e) from e
        self.completed.append(name)
        self.log.debug("Workflow step done", step=name)

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            self.log.error("Workflow commit failed", completed=self.completed, error=str(e))
            raise PartialFailureError("commit", self.reservation_id, e) from e
        self.log.info("Workflow committed", steps=self.completed)


class ReservationLifecycle:
    """Multi-record reservation workflows bound to one session"""

    def __init__(self, session: Session, locks: KeyedLock = reservation_locks):
        self.session = session
        self.locks = locks

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def book(
        self,
        diner_id: uuid.UUID,
        guests_count: int,
        date_reserved: datetime,
        notes: Optional[str] = None,
    ) -> Reservation:
        """Create a new reservation for an existing diner"""
        if guests_count is None or guests_count < 1:
            raise InvalidParameterError("guests_count must be >= 1")
        if date_reserved is None:
            raise InvalidParameterError("date_reserved is required")

        diner = get_or_raise(self.session, Diner, diner_id)
        reservation = Reservation(
            diner_id=diner.id,
            guests_count=guests_count,
            date_reserved=date_reserved,
            notes=notes,
        )

        run = _WorkflowRun(self.session, "book", reservation.id)

        with run.step("save_reservation"):
            self.session.add(reservation)

        with run.step("update_diner_reservation"):
            diner.reservation_count = self.session.exec(
                select(func.count()).select_from(Reservation).where(Reservation.diner_id == diner.id)
            ).one()
            diner.updated_at = datetime.utcnow()
            self.session.add(diner)

        run.commit()

        reservation = fetch_reservation(self.session, reservation.id, populate=("diner",))
        logger.info(f"Created reservation {reservation.id} for diner {diner_id}")
        return reservation

    # ------------------------------------------------------------------
    # Table assignment
    # ------------------------------------------------------------------

    def assign_tables(self, reservation_id: uuid.UUID, table_ids: Iterable[uuid.UUID]) -> Reservation:
        """
        Attach tables to a reservation and move it to pending.

        Adds the tables to the reservation's set, refreshes the reservation's
        table count, marks it pending, then refreshes the reservation count
        of every table involved. Re-assigning a table that is already on the
        reservation changes nothing.
        """
        table_ids = self._validate_table_ids(table_ids)

        with self.locks.hold(reservation_id):
            reservation = get_or_raise(self.session, Reservation, reservation_id)
            can_assign, reason = reservation.can_assign_tables()
            if not can_assign:
                raise InvalidStateError(f"Cannot assign tables to reservation {reservation_id}: {reason}")

            tables = self.session.exec(select(Table).where(col(Table.id).in_(table_ids))).all()
            missing = set(table_ids) - {table.id for table in tables}
            if missing:
                raise NotFoundError(
                    f"Tables not found: {', '.join(sorted(str(table_id) for table_id in missing))}"
                )

            run = _WorkflowRun(self.session, "assign_tables", reservation_id)

            with run.step("add_table_set"):
                current = set(self.session.exec(
                    select(ReservationTableLink.table_id).where(
                        ReservationTableLink.reservation_id == reservation_id
                    )
                ).all())
                for table_id in table_ids:
                    if table_id not in current:
                        self.session.add(ReservationTableLink(reservation_id=reservation_id, table_id=table_id))
                self.session.flush()

                reservation.table_count = self._count_links(ReservationTableLink.reservation_id, reservation_id)
                reservation.transition_to_pending()
                self.session.add(reservation)

            with run.step("update_table_state"):
                now = datetime.utcnow()
                for table in tables:
                    table.reservation_count = self._count_links(ReservationTableLink.table_id, table.id)
                    table.updated_at = now
                    self.session.add(table)

            run.commit()

        reservation = fetch_reservation(self.session, reservation_id, populate=("diner", "tables"))
        logger.info(f"Update tables for a reservation id: {reservation.id}", table_count=reservation.table_count)
        return reservation

    # ------------------------------------------------------------------
    # Payment capture
    # ------------------------------------------------------------------

    def capture_payment(
        self,
        reservation_id: uuid.UUID,
        charge_per_head: Any,
        deposit_percentage: Any,
        date_of_payment: Optional[datetime] = None,
        **extra: Any,
    ) -> Reservation:
        """
        Create the reservation's payment and confirm the reservation.

        ``guests_count`` is copied from the reservation when the payment is
        created; later edits to the reservation do not change it. The total
        and the deposit fee are always computed here, never taken from the
        caller.
        """
        charge = self._to_decimal("charge_per_head", charge_per_head)
        if charge < 0:
            raise InvalidParameterError("charge_per_head must be >= 0")
        percentage = self._to_decimal("deposit_percentage", deposit_percentage)
        if percentage < 0 or percentage > 1:
            raise InvalidParameterError("deposit_percentage must be between 0 and 1")
        # Rounded to the stored column scale so the total matches the persisted charge
        charge = charge.quantize(CENTS, rounding=ROUND_HALF_UP)
        percentage = percentage.quantize(PERCENTAGE_PLACES, rounding=ROUND_HALF_UP)
        extra_fields = self._validate_payment_extras(extra)

        with self.locks.hold(reservation_id):
            reservation = get_or_raise(self.session, Reservation, reservation_id)
            can_confirm, reason = reservation.can_confirm()
            if not can_confirm:
                raise InvalidStateError(f"Cannot take payment for reservation {reservation_id}: {reason}")
            if self.session.get(Payment, reservation_id) is not None:
                raise InvalidStateError(f"Reservation {reservation_id} already has a payment")

            run = _WorkflowRun(self.session, "capture_payment", reservation_id)

            with run.step("save_payment"):
                payment = Payment(
                    id=reservation.id,
                    guests_count=reservation.guests_count,
                    charge_per_head=charge,
                    deposit_percentage=percentage,
                    date_of_payment=date_of_payment or datetime.utcnow(),
                    **extra_fields,
                )
                self.session.add(payment)

            with run.step("calculate_total_fee"):
                payment.calculate_total_amount()
                self.session.add(payment)

            with run.step("find_payment"):
                # Deposit is derived from the stored total, not the in-memory one
                self.session.refresh(payment)

            with run.step("calculate_deposit_fee"):
                payment.calculate_deposit_fee()
                self.session.add(payment)

            with run.step("update_reservation"):
                reservation.transition_to_confirmed(payment.id)
                self.session.add(reservation)

            run.commit()

        reservation = fetch_reservation(self.session, reservation_id, populate=("diner", "payment"))
        logger.info(f"Save one reservation payment id: {reservation.id}")
        return reservation

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, reservation_id: uuid.UUID) -> RemovalAck:
        """
        Delete a reservation and clean every record that points at it.

        The owning diner's count drops by one, assigned tables release the
        reservation and recount, and the reservation's payment is deleted.
        """
        with self.locks.hold(reservation_id):
            reservation = get_or_raise(self.session, Reservation, reservation_id)
            diner_id = reservation.diner_id
            payment = self.session.get(Payment, reservation_id)
            links = self.session.exec(
                select(ReservationTableLink).where(ReservationTableLink.reservation_id == reservation_id)
            ).all()
            released_table_ids = [link.table_id for link in links]

            run = _WorkflowRun(self.session, "remove_reservation", reservation_id)

            with run.step("update_diner_reservation"):
                diners = self.session.exec(
                    select(Diner)
                    .join(Reservation, Reservation.diner_id == Diner.id)
                    .where(Reservation.id == reservation_id)
                ).all()
                for diner in diners:
                    diner.reservation_count = self.session.exec(
                        select(func.count()).select_from(Reservation).where(
                            Reservation.diner_id == diner.id,
                            Reservation.id != reservation_id,
                        )
                    ).one()
                    diner.updated_at = datetime.utcnow()
                    self.session.add(diner)

            with run.step("release_tables"):
                for link in links:
                    self.session.delete(link)
                self.session.flush()
                self.session.expire(reservation, ["tables"])

                if released_table_ids:
                    tables = self.session.exec(
                        select(Table).where(col(Table.id).in_(released_table_ids))
                    ).all()
                    for table in tables:
                        table.reservation_count = self._count_links(ReservationTableLink.table_id, table.id)
                        table.updated_at = datetime.utcnow()
                        self.session.add(table)

            with run.step("remove_reservation"):
                self.session.delete(reservation)

            if payment is not None:
                with run.step("remove_payment"):
                    self.session.delete(payment)

            run.commit()

        logger.info(f"Remove one reservation id: {reservation_id}")
        return RemovalAck(
            reservation_id=reservation_id,
            diner_id=diner_id,
            released_table_ids=released_table_ids,
            payment_removed=payment is not None,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _count_links(self, column, value: uuid.UUID) -> int:
        return self.session.exec(
            select(func.count()).select_from(ReservationTableLink).where(column == value)
        ).one()

    @staticmethod
    def _validate_table_ids(table_ids: Iterable[uuid.UUID]) -> List[uuid.UUID]:
        if table_ids is None:
            raise InvalidParameterError("table_ids is required")
        try:
            table_ids = [
                table_id if isinstance(table_id, uuid.UUID) else uuid.UUID(str(table_id))
                for table_id in table_ids
            ]
        except ValueError as e:
            raise InvalidParameterError(f"Invalid table id: {e}") from e

        if not table_ids:
            raise InvalidParameterError("At least one table id is required")
        if len(set(table_ids)) != len(table_ids):
            raise InvalidParameterError("Table ids must be distinct")
        return table_ids

    @staticmethod
    def _to_decimal(name: str, value: Any) -> Decimal:
        if value is None:
            raise InvalidParameterError(f"{name} is required")
        if isinstance(value, bool):
            raise InvalidParameterError(f"{name} must be a number")
        try:
            number = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidParameterError(f"{name} must be a number") from e
        if not number.is_finite():
            raise InvalidParameterError(f"{name} must be a finite number")
        return number

    @staticmethod
    def _validate_payment_extras(extra: dict) -> dict:
        unknown = sorted(set(extra) - PAYMENT_EXTRA_FIELDS)
        if unknown:
            raise InvalidParameterError(f"Unsupported payment fields: {', '.join(unknown)}")

        fields = {key: value for key, value in extra.items() if value is not None}
        if "method" in fields:
            try:
                fields["method"] = PaymentMethod(fields["method"])
            except ValueError as e:
                raise InvalidParameterError(f"Unknown payment method: {fields['method']}") from e
        return fields
