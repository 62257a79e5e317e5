"""
Schemas for restaurant tables
"""

from pydantic import BaseModel, Field
from sqlmodel import SQLModel
from typing import List, Optional
from datetime import datetime
import uuid


class TableCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(default=4, ge=1)
    description: Optional[str] = Field(default=None, max_length=500)


class TableUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    capacity: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class TableRead(SQLModel):
    id: uuid.UUID
    name: str
    capacity: int
    description: Optional[str] = None
    is_active: bool
    reservation_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class TablePage(SQLModel):
    docs: List[TableRead]
    total: int
    page: int
    limit: int
    pages: int
