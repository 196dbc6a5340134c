"""Participation status ledger — one row per status write."""
from typing import Optional

from sqlalchemy.orm import Session

from app.models.participation import Participation, ParticipationStatus
from app.models.status_change import ChangeSource, ParticipationStatusChange


def record_status_change(
    db: Session,
    participation: Participation,
    source: ChangeSource,
    to_status: ParticipationStatus,
    from_status: Optional[ParticipationStatus] = None,
    actor_user_id: Optional[int] = None,
    idempotency_key: Optional[str] = None,
) -> ParticipationStatusChange:
    """Stage a ledger row in the caller's transaction."""
    change = ParticipationStatusChange(
        participation=participation,
        actor_user_id=actor_user_id,
        source=source,
        from_status=from_status,
        to_status=to_status,
        idempotency_key=idempotency_key,
    )
    db.add(change)
    return change


def find_by_idempotency_key(db: Session, key: str) -> Optional[ParticipationStatusChange]:
    return (
        db.query(ParticipationStatusChange)
        .filter(ParticipationStatusChange.idempotency_key == key)
        .first()
    )
