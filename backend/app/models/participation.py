"""Participation ORM model — one user's relationship to one event."""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, Numeric, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.database import Base


class ParticipationStatus(str, enum.Enum):
    pending_approval = "pending_approval"
    attending = "attending"
    interested = "interested"
    rejected = "rejected"
    not_participating = "not_participating"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Participation(Base):
    __tablename__ = "event_participants"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(SAEnum(ParticipationStatus), nullable=False)
    ticket_quantity = Column(Integer, nullable=True, default=1)
    total_amount = Column(Numeric(10, 2), nullable=True)
    payment_status = Column(SAEnum(PaymentStatus), nullable=True)
    payment_intent_id = Column(String(255), nullable=True, unique=True)
    stripe_checkout_session_id = Column(String(255), nullable=True)
    ticket_identifier = Column(String(36), nullable=True, unique=True)
    purchase_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    event = relationship("Event", back_populates="participants")
    user = relationship("User")
    status_changes = relationship("ParticipationStatusChange", back_populates="participation")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participants_event_user"),
        CheckConstraint("ticket_quantity IS NULL OR ticket_quantity >= 1", name="ck_event_participants_ticket_quantity"),
    )
