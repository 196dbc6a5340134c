"""Application API routes — host review of pending participations.

Mounted under /api/events ahead of the events router so that
``/api/events/applications`` is not captured by ``/{event_id}``.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_acting_user, path_id
from app.models.user import User
from app.schemas.application import (
    ApplicationDecisionOut,
    ApplicationDecisionRequest,
    ApplicationOut,
    ApplicationsOverviewOut,
    PendingApplicationsOut,
)
from app.services import application_service
from app.services.errors import unwrap

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/applications", response_model=ApplicationsOverviewOut)
def list_all_applications(
    event_id: Optional[str] = Query(None, alias="eventId"),
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Pending and decided applications across the host's events."""
    parsed = path_id(event_id, "eventId") if event_id is not None else None
    return unwrap(application_service.list_completed_applications(db, acting_user, event_id=parsed))


@router.get("/{event_id}/applications", response_model=PendingApplicationsOut)
def list_pending_applications(
    event_id: str,
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Pending applications for one event (host only)."""
    return unwrap(application_service.list_pending_applications(db, path_id(event_id, "eventId"), acting_user))


@router.put("/{event_id}/applications/{user_id}", response_model=ApplicationDecisionOut)
def decide_application(
    event_id: str,
    user_id: str,
    payload: Optional[ApplicationDecisionRequest] = Body(None),
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Approve or reject an application (host only)."""
    return unwrap(application_service.decide_application(
        db,
        event_id=path_id(event_id, "eventId"),
        applicant_user_id=path_id(user_id, "userId"),
        decision=payload.status if payload is not None else None,
        acting_user=acting_user,
    ))


@router.get("/{event_id}/applications/{user_id}", response_model=ApplicationOut)
def get_application_status(
    event_id: str,
    user_id: str,
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """One application, readable by the applicant or the host."""
    return unwrap(application_service.get_application_status(
        db, path_id(event_id, "eventId"), path_id(user_id, "userId"), acting_user,
    ))
