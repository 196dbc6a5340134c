"""ParticipationStatusChange ORM model — append-only ledger of status writes."""
import enum
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.participation import ParticipationStatus, _utcnow


class ChangeSource(str, enum.Enum):
    host_decision = "host_decision"
    payment_webhook = "payment_webhook"
    self_rsvp = "self_rsvp"


class ParticipationStatusChange(Base):
    __tablename__ = "participation_status_changes"

    id = Column(Integer, primary_key=True)
    participation_id = Column(Integer, ForeignKey("event_participants.id"), nullable=False, index=True)
    actor_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # null for webhook writes
    source = Column(SAEnum(ChangeSource), nullable=False)
    from_status = Column(SAEnum(ParticipationStatus), nullable=True)
    to_status = Column(SAEnum(ParticipationStatus), nullable=False)
    idempotency_key = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    participation = relationship("Participation", back_populates="status_changes")
