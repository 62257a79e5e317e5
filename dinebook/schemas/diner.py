"""
Pydantic schemas for diners
"""

from pydantic import BaseModel, Field, EmailStr
from sqlmodel import SQLModel
from typing import List, Optional
from datetime import datetime
import uuid


class DinerCreate(BaseModel):
    """Diner registration schema"""
    fname: str = Field(..., min_length=1, max_length=100)
    lname: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)


class DinerUpdate(BaseModel):
    """Diner contact update schema"""
    fname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)


class DinerSummary(SQLModel):
    """Diner contact details embedded in reservation responses"""
    id: uuid.UUID
    fname: str
    lname: str
    email: str
    phone: Optional[str] = None


class DinerRead(DinerSummary):
    """Diner response model"""
    reservation_count: int
    date_registered: datetime
    updated_at: Optional[datetime] = None


class DinerPage(SQLModel):
    docs: List[DinerRead]
    total: int
    page: int
    limit: int
    pages: int
