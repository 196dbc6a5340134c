"""Pydantic schemas for self-service RSVP."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from app.schemas.base import CamelModel


class ParticipationRequest(CamelModel):
    status: Any = None


class ParticipationOut(CamelModel):
    id: int
    event_id: int
    user_id: int
    status: str
    ticket_quantity: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ParticipationStatusOut(CamelModel):
    status: str


class ParticipationChangeOut(CamelModel):
    status: str
    participation: Optional[ParticipationOut] = None
