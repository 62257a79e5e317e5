"""
Payment model
Deposit captured for a reservation, keyed by the reservation's id
"""

from sqlmodel import Field, SQLModel
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

CENTS = Decimal("0.01")
PERCENTAGE_PLACES = Decimal("0.0001")


class PaymentMethod(str, Enum):
    """Payment methods accepted for reservation deposits"""
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class Payment(SQLModel, table=True):
    """Reservation payment with server-computed totals"""

    __tablename__ = "payments"

    # Same value as the owning reservation's id
    id: uuid.UUID = Field(primary_key=True)

    # Snapshot of Reservation.guests_count taken when the payment was created
    guests_count: int = Field(description="Guests count at the time of payment")

    # Caller-supplied pricing
    charge_per_head: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Charge per guest"
    )
    deposit_percentage: Decimal = Field(
        max_digits=5,
        decimal_places=4,
        description="Fraction of the total held as deposit (0..1)"
    )

    # Derived amounts
    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="guests_count * charge_per_head"
    )
    deposit_fee: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="total_amount - total_amount * deposit_percentage"
    )

    method: PaymentMethod = Field(
        default=PaymentMethod.CARD,
        description="Payment method used"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=500,
        nullable=True,
        description="Notes about this payment"
    )

    # Timestamps
    date_of_payment: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def calculate_total_amount(self) -> Decimal:
        """Set and return total_amount from the guests snapshot"""
        self.total_amount = (Decimal(self.guests_count) * Decimal(self.charge_per_head)).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        return self.total_amount

    def calculate_deposit_fee(self) -> Decimal:
        """Set and return deposit_fee from the persisted total_amount"""
        total = Decimal(self.total_amount)
        fee = total - (total * Decimal(self.deposit_percentage))
        self.deposit_fee = fee.quantize(CENTS, rounding=ROUND_HALF_UP)
        return self.deposit_fee
