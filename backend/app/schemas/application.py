"""Pydantic schemas for host-facing application views."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from app.schemas.base import CamelModel


class ApplicantOut(CamelModel):
    username: str = "Unknown"
    full_name: str = "Unknown"
    email: str = ""


class ApplicationOut(ApplicantOut):
    id: int
    event_id: int
    event_title: Optional[str] = None
    user_id: int
    status: str
    ticket_quantity: int = 1
    total_amount: Optional[float] = None
    purchase_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PendingApplicationsOut(CamelModel):
    event_id: int
    event_title: str
    applications: list[ApplicationOut]
    total_pending: int


class ApplicationsOverviewOut(CamelModel):
    pending: list[ApplicationOut]
    completed: list[ApplicationOut]
    total_pending: int
    total_completed: int


class ApplicationDecisionRequest(CamelModel):
    # Validated by the service so a bad value yields the documented message
    status: Any = None


class ApplicationDecisionOut(CamelModel):
    message: str
    application: ApplicationOut
    applicant: ApplicantOut
