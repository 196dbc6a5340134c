"""Event ORM model — host ownership plus the capacity counters."""
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, Numeric, ForeignKey, CheckConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class TicketType(str, enum.Enum):
    free = "free"
    paid = "paid"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=True)
    capacity = Column(Integer, nullable=True)  # null = unlimited
    attending_count = Column(Integer, nullable=False, default=0)
    interested_count = Column(Integer, nullable=False, default=0)
    is_private = Column(Boolean, nullable=False, default=False)
    require_approval = Column(Boolean, nullable=False, default=False)
    ticket_type = Column(SAEnum(TicketType), nullable=False, default=TicketType.free)
    price = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    host = relationship("User")
    participants = relationship("Participation", back_populates="event")

    __table_args__ = (
        CheckConstraint("attending_count >= 0", name="ck_events_attending_count_non_negative"),
        CheckConstraint("interested_count >= 0", name="ck_events_interested_count_non_negative"),
    )
