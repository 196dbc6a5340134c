"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import Field

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=200)


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
