"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import Field

from app.schemas.base import CamelModel


class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime] = None
    capacity: Optional[int] = Field(default=None, ge=1, le=2**31 - 1)  # None = unlimited
    is_private: bool = False
    require_approval: bool = False
    ticket_type: Literal["free", "paid"] = "free"
    price: Optional[Decimal] = Field(default=None, ge=0)


class EventOut(CamelModel):
    id: int
    host_id: int
    title: str
    description: Optional[str] = None
    date: Optional[datetime] = None
    capacity: Optional[int] = None
    attending_count: int
    interested_count: int
    is_private: bool
    require_approval: bool
    ticket_type: str
    price: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
