"""
Reservation model with lifecycle state machine
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from dinebook.models.reservation_table_link import ReservationTableLink

if TYPE_CHECKING:
    from dinebook.models.diner import Diner
    from dinebook.models.table import Table
    from dinebook.models.payment import Payment


class ReservationStatus(str, Enum):
    """Status of a reservation"""
    NEW = "new"                     # Booked, no tables or payment yet
    PENDING = "pending"             # Tables assigned, waiting for payment
    CONFIRMED = "confirmed"         # Payment captured


class Reservation(SQLModel, table=True):
    """Reservation aggregate linking a diner, tables and a payment"""

    __tablename__ = "reservations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    diner_id: uuid.UUID = Field(
        foreign_key="diners.id",
        index=True,
        description="Diner who booked the reservation"
    )
    payment_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="payments.id",
        nullable=True,
        description="Payment captured for this reservation"
    )

    # Booking details
    guests_count: int = Field(default=1, description="Number of guests in the party")
    date_reserved: datetime = Field(
        index=True,
        description="Date and time the table is reserved for"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        nullable=True,
        description="Special requests (allergies, occasion, etc.)"
    )

    # Lifecycle
    status: ReservationStatus = Field(
        default=ReservationStatus.NEW,
        index=True,
        description="Current status of the reservation"
    )
    table_count: int = Field(default=0, description="Denormalized size of the tables set")

    # Bumped by every lifecycle workflow
    version: int = Field(default=1, description="Version number for optimistic concurrency control")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    # Relationships
    diner: Optional["Diner"] = Relationship(back_populates="reservations")
    tables: list["Table"] = Relationship(
        back_populates="reservations",
        link_model=ReservationTableLink,
    )
    payment: Optional["Payment"] = Relationship()

    # State machine methods
    def can_assign_tables(self) -> tuple[bool, str]:
        """Check if tables can be assigned to this reservation"""
        if self.status == ReservationStatus.CONFIRMED:
            return False, "Reservation is already confirmed"
        return True, "Can assign tables"

    def can_confirm(self) -> tuple[bool, str]:
        """Check if a payment can be attached to this reservation"""
        if self.payment_id is not None or self.status == ReservationStatus.CONFIRMED:
            return False, "Reservation already has a payment"
        if self.status != ReservationStatus.PENDING:
            return False, "Reservation has no tables assigned"
        if self.table_count <= 0:
            return False, "Reservation has no tables assigned"
        return True, "Can confirm reservation"

    def transition_to_pending(self) -> None:
        """Transition reservation to pending status (tables assigned)"""
        can_assign, reason = self.can_assign_tables()
        if not can_assign:
            raise ValueError(f"Cannot transition to pending: {reason}")
        if self.table_count <= 0:
            raise ValueError("Cannot transition to pending: no tables assigned")

        self.status = ReservationStatus.PENDING
        self.updated_at = datetime.utcnow()
        self.version += 1

    def transition_to_confirmed(self, payment_id: uuid.UUID) -> None:
        """Transition reservation to confirmed status (payment captured)"""
        can_confirm, reason = self.can_confirm()
        if not can_confirm:
            raise ValueError(f"Cannot confirm reservation: {reason}")

        self.status = ReservationStatus.CONFIRMED
        self.payment_id = payment_id
        self.updated_at = datetime.utcnow()
        self.version += 1

    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED
