"""
Counter reconciliation

Recomputes every denormalized counter from the link and foreign-key sets
and repairs reservations whose status disagrees with their tables/payment.
"""

from datetime import datetime
from typing import Dict
import structlog

from sqlalchemy import func
from sqlmodel import Session, select

from dinebook.models import Diner, Payment, Reservation, ReservationStatus, ReservationTableLink, Table

logger = structlog.get_logger(__name__)


def _link_counts(session: Session, column) -> Dict:
    rows = session.exec(
        select(column, func.count()).select_from(ReservationTableLink).group_by(column)
    ).all()
    return {key: count for key, count in rows}


def reconcile_counters(session: Session) -> dict:
    """Fix drifted counters and statuses, return how many records changed"""
    try:
        fixed_diners = 0
        fixed_tables = 0
        fixed_reservations = 0
        now = datetime.utcnow()

        diner_counts = dict(session.exec(
            select(Reservation.diner_id, func.count()).group_by(Reservation.diner_id)
        ).all())
        for diner in session.exec(select(Diner)).all():
            expected = diner_counts.get(diner.id, 0)
            if diner.reservation_count != expected:
                logger.info(f"Diner {diner.id} count {diner.reservation_count} -> {expected}")
                diner.reservation_count = expected
                diner.updated_at = now
                session.add(diner)
                fixed_diners += 1

        table_counts = _link_counts(session, ReservationTableLink.table_id)
        for table in session.exec(select(Table)).all():
            expected = table_counts.get(table.id, 0)
            if table.reservation_count != expected:
                logger.info(f"Table {table.id} count {table.reservation_count} -> {expected}")
                table.reservation_count = expected
                table.updated_at = now
                session.add(table)
                fixed_tables += 1

        reservation_counts = _link_counts(session, ReservationTableLink.reservation_id)
        payment_ids = set(session.exec(select(Payment.id)).all())
        for reservation in session.exec(select(Reservation)).all():
            changed = False
            expected = reservation_counts.get(reservation.id, 0)
            if reservation.table_count != expected:
                reservation.table_count = expected
                changed = True

            # A stored payment keyed by this reservation wins over the status label
            if reservation.id in payment_ids:
                if reservation.payment_id != reservation.id or reservation.status != ReservationStatus.CONFIRMED:
                    reservation.payment_id = reservation.id
                    reservation.status = ReservationStatus.CONFIRMED
                    changed = True
            else:
                if reservation.payment_id is not None:
                    reservation.payment_id = None
                    changed = True
                status = ReservationStatus.PENDING if expected > 0 else ReservationStatus.NEW
                if reservation.status != status:
                    reservation.status = status
                    changed = True

            if changed:
                logger.info(f"Reservation {reservation.id} reconciled", status=reservation.status.value)
                reservation.updated_at = now
                reservation.version += 1
                session.add(reservation)
                fixed_reservations += 1

        session.commit()

        return {
            "processed": fixed_diners + fixed_tables + fixed_reservations,
            "diners": fixed_diners,
            "tables": fixed_tables,
            "reservations": fixed_reservations,
        }

    except Exception as e:
        session.rollback()
        logger.error(f"Error reconciling counters: {e}")
        raise
