"""Application service — host decisions on pending participations.

Responsibilities:
- Authorization: only the event host may list or decide applications
- State machine: pending_approval → attending | rejected, nothing else
- Capacity: approvals claim seats with a conditional UPDATE, so two
  concurrent approvals cannot jointly overshoot the event's capacity
- Ledger: every decision appends a ParticipationStatusChange row

Expected failures come back as ServiceError values; only infrastructure
errors raise.
"""
import enum
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import and_, exists, update
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.participation import Participation, ParticipationStatus
from app.models.status_change import ChangeSource, ParticipationStatusChange
from app.models.user import User
from app.services.counters import claim_seats
from app.services.errors import Forbidden, InvalidStatus, InvalidTransition, NotFound, ServiceError
from app.services.ledger import record_status_change
from app.services.rsvp_rules import can_approve, capacity_exceeded, effective_quantity, is_event_host

logger = logging.getLogger(__name__)

FORBIDDEN_MESSAGE = "You can only manage applications for your own events"
INVALID_STATUS_MESSAGE = "Invalid status. Must be 'approved' or 'rejected'"

COMPLETED_STATUSES = (
    ParticipationStatus.attending,
    ParticipationStatus.interested,
    ParticipationStatus.rejected,
)


class ApplicationAction(str, enum.Enum):
    approve = "approve"
    reject = "reject"


# Request-body vocabulary ("approved"/"rejected") → transition actions
DECISIONS = {
    "approved": ApplicationAction.approve,
    "rejected": ApplicationAction.reject,
}

_RESULTING_STATUS = {
    ApplicationAction.approve: ParticipationStatus.attending,
    ApplicationAction.reject: ParticipationStatus.rejected,
}


def applicant_fields(user: Optional[User]) -> dict[str, str]:
    """Display fields for an applicant, with placeholders for missing data."""
    return {
        "username": user.username if user is not None and user.username else "Unknown",
        "full_name": user.full_name if user is not None and user.full_name else "Unknown",
        "email": user.email if user is not None and user.email else "",
    }


def application_summary(participation: Participation, user: Optional[User],
                        event_title: Optional[str] = None) -> dict[str, Any]:
    return {
        "id": participation.id,
        "event_id": participation.event_id,
        "event_title": event_title,
        "user_id": participation.user_id,
        "status": participation.status.value,
        "ticket_quantity": effective_quantity(participation.ticket_quantity),
        "total_amount": participation.total_amount,
        "purchase_date": participation.purchase_date,
        "created_at": participation.created_at,
        "updated_at": participation.updated_at,
        **applicant_fields(user),
    }


def _load_hosted_event(db: Session, event_id: int, acting_user: User) -> Event | ServiceError:
    """Fetch the event and make sure ``acting_user`` hosts it."""
    event = db.get(Event, event_id)
    if event is None:
        return NotFound("Event not found")
    if not is_event_host(event, acting_user.id):
        logger.warning("User %s denied access to applications of event %s", acting_user.id, event_id)
        return Forbidden(FORBIDDEN_MESSAGE)
    return event


def _not_pending(participation: Participation) -> InvalidTransition:
    current = participation.status.value
    return InvalidTransition(
        message=f"Application is not pending approval (current status: {current})",
        current_status=current,
    )


def transition(
    db: Session,
    participation: Participation,
    action: ApplicationAction | str,
    actor_user_id: int,
) -> Participation | ServiceError:
    """Move a pending participation to attending (approve) or rejected (reject).

    Validation happens before any write, and all writes (capacity claim,
    status, ledger) commit together or not at all.
    """
    try:
        action = ApplicationAction(action)
    except ValueError:
        return InvalidStatus(INVALID_STATUS_MESSAGE)

    if participation.status != ParticipationStatus.pending_approval:
        return _not_pending(participation)

    event = participation.event
    quantity = effective_quantity(participation.ticket_quantity)

    if action is ApplicationAction.approve:
        if not can_approve(event, quantity):
            return capacity_exceeded(event, quantity)
        if not claim_seats(db, event.id, quantity):
            # Another approval committed after our read
            db.rollback()
            db.refresh(event)
            logger.warning(
                "Capacity claim lost for participation %s on event %s (%s/%s, requested %d)",
                participation.id, event.id, event.attending_count, event.capacity, quantity,
            )
            return capacity_exceeded(event, quantity)

    new_status = _RESULTING_STATUS[action]
    moved = db.execute(
        update(Participation)
        .where(
            Participation.id == participation.id,
            Participation.status == ParticipationStatus.pending_approval,
        )
        .values(status=new_status, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    ).rowcount
    if moved != 1:
        db.rollback()
        db.refresh(participation)
        logger.warning("Participation %s was decided concurrently", participation.id)
        return _not_pending(participation)

    record_status_change(
        db,
        participation,
        source=ChangeSource.host_decision,
        from_status=ParticipationStatus.pending_approval,
        to_status=new_status,
        actor_user_id=actor_user_id,
    )
    db.commit()
    db.refresh(participation)
    logger.info(
        "Participation %s (event %s, user %s) %s by host %s",
        participation.id, participation.event_id, participation.user_id, new_status.value, actor_user_id,
    )
    return participation


def decide_application(
    db: Session,
    event_id: int,
    applicant_user_id: int,
    decision: Optional[str],
    acting_user: User,
) -> dict[str, Any] | ServiceError:
    """Approve or reject one user's application to an event the actor hosts."""
    action = DECISIONS.get(decision) if isinstance(decision, str) else None
    if action is None:
        return InvalidStatus(INVALID_STATUS_MESSAGE)

    event = _load_hosted_event(db, event_id, acting_user)
    if isinstance(event, ServiceError):
        return event

    participation = (
        db.query(Participation)
        .filter(Participation.event_id == event.id, Participation.user_id == applicant_user_id)
        .first()
    )
    if participation is None:
        return NotFound("Application not found for this user and event")

    result = transition(db, participation, action, acting_user.id)
    if isinstance(result, ServiceError):
        return result

    applicant = db.get(User, applicant_user_id)
    return {
        "message": f"Application {decision} successfully",
        "application": application_summary(result, applicant, event_title=event.title),
        "applicant": applicant_fields(applicant),
    }


def list_pending_applications(db: Session, event_id: int, acting_user: User) -> dict[str, Any] | ServiceError:
    """Pending applications of one hosted event, newest first."""
    event = _load_hosted_event(db, event_id, acting_user)
    if isinstance(event, ServiceError):
        return event

    rows = (
        db.query(Participation, User)
        .outerjoin(User, User.id == Participation.user_id)
        .filter(
            Participation.event_id == event.id,
            Participation.status == ParticipationStatus.pending_approval,
        )
        .order_by(Participation.created_at.desc(), Participation.id.desc())
        .all()
    )
    applications = [application_summary(p, u, event_title=event.title) for p, u in rows]
    return {
        "event_id": event.id,
        "event_title": event.title,
        "applications": applications,
        "total_pending": len(applications),
    }


def list_completed_applications(
    db: Session,
    acting_user: User,
    event_id: Optional[int] = None,
) -> dict[str, Any] | ServiceError:
    """Pending and decided applications across the actor's hosted events.

    A decided ("completed") application is one now attending, interested or
    rejected that at some point left pending_approval, according to the
    ledger. Restrict to a single event by passing ``event_id``.
    """
    if event_id is not None:
        event = _load_hosted_event(db, event_id, acting_user)
        if isinstance(event, ServiceError):
            return event
        event_ids = [event.id]
    else:
        event_ids = [eid for (eid,) in db.query(Event.id).filter(Event.host_id == acting_user.id).all()]

    if not event_ids:
        return {"pending": [], "completed": [], "total_pending": 0, "total_completed": 0}

    base = (
        db.query(Participation, User, Event.title)
        .join(Event, Event.id == Participation.event_id)
        .outerjoin(User, User.id == Participation.user_id)
        .filter(Participation.event_id.in_(event_ids))
    )
    pending_rows = (
        base.filter(Participation.status == ParticipationStatus.pending_approval)
        .order_by(Participation.created_at.desc(), Participation.id.desc())
        .all()
    )
    went_through_approval = exists().where(and_(
        ParticipationStatusChange.participation_id == Participation.id,
        ParticipationStatusChange.from_status == ParticipationStatus.pending_approval,
    ))
    completed_rows = (
        base.filter(Participation.status.in_(COMPLETED_STATUSES), went_through_approval)
        .order_by(Participation.updated_at.desc(), Participation.id.desc())
        .all()
    )

    pending = [application_summary(p, u, event_title=title) for p, u, title in pending_rows]
    completed = [application_summary(p, u, event_title=title) for p, u, title in completed_rows]
    return {
        "pending": pending,
        "completed": completed,
        "total_pending": len(pending),
        "total_completed": len(completed),
    }


def get_application_status(
    db: Session,
    event_id: int,
    user_id: int,
    acting_user: User,
) -> dict[str, Any] | ServiceError:
    """One application, visible to the applicant and to the event host."""
    event = db.get(Event, event_id)
    if acting_user.id != user_id:
        if event is None:
            return NotFound("Event not found")
        if not is_event_host(event, acting_user.id):
            return Forbidden("You can only check your own application status")

    participation = (
        db.query(Participation)
        .filter(Participation.event_id == event_id, Participation.user_id == user_id)
        .first()
    )
    if participation is None:
        return NotFound("No application found")
    return application_summary(participation, db.get(User, user_id),
                               event_title=event.title if event is not None else None)
