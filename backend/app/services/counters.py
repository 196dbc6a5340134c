"""Atomic writes to an event's attending/interested counters.

Each helper issues a single UPDATE so the database, not a stale in-memory row,
decides whether a seat is still free. Callers own the transaction.
"""
from sqlalchemy import case, func, or_, update
from sqlalchemy.orm import Session

from app.models.event import Event


def claim_seats(db: Session, event_id: int, quantity: int) -> bool:
    """Add ``quantity`` attendees if capacity allows; False when it does not."""
    attending = func.coalesce(Event.attending_count, 0)
    stmt = (
        update(Event)
        .where(
            Event.id == event_id,
            or_(Event.capacity.is_(None), attending + quantity <= Event.capacity),
        )
        .values(attending_count=attending + quantity)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def release_seats(db: Session, event_id: int, quantity: int) -> None:
    remaining = func.coalesce(Event.attending_count, 0) - quantity
    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(attending_count=case((remaining < 0, 0), else_=remaining))
        .execution_options(synchronize_session=False)
    )


def adjust_interest(db: Session, event_id: int, delta: int) -> None:
    updated = func.coalesce(Event.interested_count, 0) + delta
    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(interested_count=case((updated < 0, 0), else_=updated))
        .execution_options(synchronize_session=False)
    )
