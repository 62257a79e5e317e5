"""
Diner model for guests who book reservations
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from dinebook.models.reservation import Reservation


class Diner(SQLModel, table=True):
    """Diner contact record"""

    __tablename__ = "diners"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Contact details
    fname: str = Field(max_length=100, nullable=False, description="First name")
    lname: str = Field(max_length=100, nullable=False, description="Last name")
    email: str = Field(max_length=255, index=True, description="Contact email")
    phone: Optional[str] = Field(default=None, max_length=50, nullable=True, description="Contact phone")

    # Denormalized count of reservations referencing this diner
    reservation_count: int = Field(default=0, description="Number of live reservations for this diner")

    # Timestamps
    date_registered: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    # Relationships
    reservations: list["Reservation"] = Relationship(back_populates="diner")

    @property
    def full_name(self) -> str:
        return f"{self.fname} {self.lname}"
