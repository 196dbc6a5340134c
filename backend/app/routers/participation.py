"""Self-service RSVP routes."""
from typing import Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_acting_user, path_id
from app.models.user import User
from app.schemas.participation import ParticipationChangeOut, ParticipationRequest, ParticipationStatusOut
from app.services import participation_service
from app.services.errors import unwrap

router = APIRouter()


@router.post("/{event_id}/participate", response_model=ParticipationChangeOut)
def participate(
    event_id: str,
    payload: Optional[ParticipationRequest] = Body(None),
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    return unwrap(participation_service.set_participation(
        db, path_id(event_id, "eventId"), acting_user, payload.status if payload is not None else None,
    ))


@router.get("/{event_id}/participation/status", response_model=ParticipationStatusOut)
def participation_status(
    event_id: str,
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    return unwrap(participation_service.get_participation_status(db, path_id(event_id, "eventId"), acting_user))
