"""Event API routes — minimal create/read surface for hosted events."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_acting_user, path_id
from app.models.event import Event, TicketType
from app.models.user import User
from app.schemas.event import EventCreate, EventOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    acting_user: User = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Create an event hosted by the acting user."""
    fields = payload.model_dump()
    fields["ticket_type"] = TicketType(fields["ticket_type"])
    event = Event(host_id=acting_user.id, attending_count=0, interested_count=0, **fields)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("User %s created event %s (capacity=%s)", acting_user.id, event.id, event.capacity)
    return event


@router.get("/", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    """List events, soonest first."""
    return db.query(Event).order_by(Event.date, Event.id).all()


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event by ID."""
    event = db.get(Event, path_id(event_id, "eventId"))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event
