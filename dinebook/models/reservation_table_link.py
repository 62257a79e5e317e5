"""
Link table between reservations and the tables assigned to them
"""

from sqlmodel import Field, SQLModel
import uuid


class ReservationTableLink(SQLModel, table=True):
    """One row per (reservation, table) pair; the primary key enforces set semantics"""

    __tablename__ = "reservation_tables"

    reservation_id: uuid.UUID = Field(foreign_key="reservations.id", primary_key=True)
    table_id: uuid.UUID = Field(foreign_key="tables.id", primary_key=True, index=True)
