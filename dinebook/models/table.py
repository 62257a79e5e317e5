"""
Table model for restaurant seating
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
import uuid

from dinebook.models.reservation_table_link import ReservationTableLink

if TYPE_CHECKING:
    from dinebook.models.reservation import Reservation


class Table(SQLModel, table=True):
    """Table model for restaurant seating"""

    __tablename__ = "tables"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Table details
    name: str = Field(max_length=50, nullable=False, description="Table identifier (e.g., 'A1', 'B3')")
    capacity: int = Field(default=4, description="Maximum number of guests")
    description: Optional[str] = Field(default=None, max_length=500, nullable=True, description="Optional description of the table")

    # Status
    is_active: bool = Field(default=True, index=True)

    # Denormalized size of the reservations back-reference set
    reservation_count: int = Field(default=0, description="Number of reservations holding this table")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    # Relationships
    reservations: list["Reservation"] = Relationship(
        back_populates="tables",
        link_model=ReservationTableLink,
    )
