"""Self-service RSVP: attending / interested / not_participating on open events."""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event import Event, TicketType
from app.models.participation import Participation, ParticipationStatus
from app.models.status_change import ChangeSource
from app.models.user import User
from app.services.counters import adjust_interest, claim_seats, release_seats
from app.services.errors import BadRequest, InvalidTransition, NotFound, ServiceError
from app.services.ledger import record_status_change
from app.services.rsvp_rules import capacity_exceeded, effective_quantity

logger = logging.getLogger(__name__)

SELF_SERVICE_STATUSES = {
    ParticipationStatus.attending,
    ParticipationStatus.interested,
    ParticipationStatus.not_participating,
}
HOST_MANAGED_STATUSES = {ParticipationStatus.pending_approval, ParticipationStatus.rejected}


def _release(db: Session, participation: Participation) -> None:
    if participation.status == ParticipationStatus.attending:
        release_seats(db, participation.event_id, effective_quantity(participation.ticket_quantity))
    elif participation.status == ParticipationStatus.interested:
        adjust_interest(db, participation.event_id, -1)


def set_participation(db: Session, event_id: int, acting_user: User, status: Any) -> dict[str, Any] | ServiceError:
    """Change the acting user's own participation in an event.

    Seats and interest are released from the old status before the new one is
    claimed; the whole change commits once.
    """
    try:
        new_status = ParticipationStatus(status)
    except ValueError:
        new_status = None
    if new_status not in SELF_SERVICE_STATUSES:
        return BadRequest('Invalid status value. Must be "interested", "attending", or "not_participating".')

    event = db.get(Event, event_id)
    if event is None:
        return NotFound("Event not found")

    participation = (
        db.query(Participation)
        .filter(Participation.event_id == event_id, Participation.user_id == acting_user.id)
        .first()
    )
    current = participation.status if participation is not None else ParticipationStatus.not_participating

    if participation is not None and current in HOST_MANAGED_STATUSES:
        return InvalidTransition(
            message=f"Your participation is {current.value} and can only be changed by the host",
            current_status=current.value,
        )
    if new_status == current:
        return {"status": current.value, "participation": participation}

    if new_status != ParticipationStatus.not_participating:
        if event.is_private:
            return BadRequest("This event is private; request access from the host")
        if new_status == ParticipationStatus.attending and (
            event.require_approval or event.ticket_type == TicketType.paid
        ):
            return BadRequest("This event requires an application or a ticket purchase")

    now = datetime.now(timezone.utc)
    previous_status = participation.status if participation is not None else None
    if participation is not None:
        _release(db, participation)

    if new_status == ParticipationStatus.attending:
        quantity = effective_quantity(participation.ticket_quantity if participation is not None else None)
        if not claim_seats(db, event_id, quantity):
            db.rollback()
            db.refresh(event)
            return capacity_exceeded(event, quantity, message="This event is at capacity")
    elif new_status == ParticipationStatus.interested:
        adjust_interest(db, event_id, 1)

    if participation is None:
        participation = Participation(event_id=event_id, user_id=acting_user.id, ticket_quantity=1, created_at=now)
        db.add(participation)
    participation.status = new_status
    participation.updated_at = now

    record_status_change(
        db,
        participation,
        source=ChangeSource.self_rsvp,
        from_status=previous_status,
        to_status=new_status,
        actor_user_id=acting_user.id,
    )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent RSVP for event %s by user %s", event_id, acting_user.id)
        return BadRequest("Your participation changed concurrently; please retry")

    db.refresh(participation)
    logger.info("User %s RSVP for event %s: %s -> %s", acting_user.id, event_id, current.value, new_status.value)
    return {"status": participation.status.value, "participation": participation}


def get_participation_status(db: Session, event_id: int, acting_user: User) -> dict[str, str] | ServiceError:
    if db.get(Event, event_id) is None:
        return NotFound("Event not found")
    participation = (
        db.query(Participation)
        .filter(Participation.event_id == event_id, Participation.user_id == acting_user.id)
        .first()
    )
    if participation is None:
        return {"status": ParticipationStatus.not_participating.value}
    return {"status": participation.status.value}
