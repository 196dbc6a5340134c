"""Payment service — turns confirmed payments into pending applications.

A successful payment never grants a seat by itself: it creates (or reuses)
the participation in ``pending_approval`` and leaves the decision to the host.
Deliveries are idempotent on the payment transaction id.
"""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.participation import Participation, ParticipationStatus, PaymentStatus
from app.models.status_change import ChangeSource
from app.models.user import User
from app.schemas.webhook import PaymentIntentRef, WebhookEvent
from app.services.counters import adjust_interest
from app.services.errors import BadRequest, NotFound, ServiceError
from app.services.ledger import find_by_idempotency_key, record_status_change
from app.services.rsvp_rules import parse_positive_id

logger = logging.getLogger(__name__)

# Pairs in these states already hold a paid application; a new payment changes nothing
_ALREADY_APPLIED = (ParticipationStatus.pending_approval, ParticipationStatus.attending)

PAID_SESSION_STATUSES = {"paid", "no_payment_required"}


def _find_pair(db: Session, event_id: int, user_id: int) -> Optional[Participation]:
    return (
        db.query(Participation)
        .filter(Participation.event_id == event_id, Participation.user_id == user_id)
        .first()
    )


def on_payment_succeeded(
    db: Session,
    event_id: int,
    user_id: int,
    ticket_quantity: Optional[int] = None,
    amount: Optional[Decimal] = None,
    transaction_id: Optional[str] = None,
    checkout_session_id: Optional[str] = None,
) -> Participation | ServiceError:
    """Record a successful payment as a pending application.

    Returns the affected participation. Repeated deliveries of the same
    transaction, and payments for a pair that already applied or attends,
    return the existing record untouched.
    """
    quantity = 1 if ticket_quantity is None else ticket_quantity
    if quantity < 1:
        return BadRequest("Ticket quantity must be at least 1")
    if amount is not None and amount < 0:
        return BadRequest("Payment amount cannot be negative")

    if transaction_id:
        seen = find_by_idempotency_key(db, transaction_id)
        if seen is not None:
            logger.info("Duplicate payment %s ignored (participation %s)", transaction_id, seen.participation_id)
            return seen.participation

    if db.get(Event, event_id) is None:
        return NotFound("Event not found")
    if db.get(User, user_id) is None:
        return NotFound("User not found")

    participation = _find_pair(db, event_id, user_id)
    if participation is not None and participation.status in _ALREADY_APPLIED:
        logger.warning(
            "Payment %s for event %s / user %s ignored: participation already %s",
            transaction_id, event_id, user_id, participation.status.value,
        )
        return participation

    now = datetime.now(timezone.utc)
    previous_status = None
    if participation is None:
        participation = Participation(event_id=event_id, user_id=user_id, created_at=now)
        db.add(participation)
    else:
        previous_status = participation.status
        if previous_status == ParticipationStatus.interested:
            adjust_interest(db, event_id, -1)

    participation.status = ParticipationStatus.pending_approval
    participation.ticket_quantity = quantity
    participation.total_amount = amount
    participation.payment_status = PaymentStatus.completed
    participation.payment_intent_id = transaction_id
    participation.stripe_checkout_session_id = checkout_session_id
    participation.ticket_identifier = str(uuid.uuid4())
    participation.purchase_date = now
    participation.updated_at = now

    record_status_change(
        db,
        participation,
        source=ChangeSource.payment_webhook,
        from_status=previous_status,
        to_status=ParticipationStatus.pending_approval,
        idempotency_key=transaction_id,
    )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_pair(db, event_id, user_id)
        if existing is None:
            raise
        logger.info("Concurrent payment for event %s / user %s resolved to participation %s",
                    event_id, user_id, existing.id)
        return existing

    db.refresh(participation)
    logger.info(
        "Payment %s recorded: participation %s pending approval (event %s, user %s, %d tickets, amount %s)",
        transaction_id, participation.id, event_id, user_id, quantity, amount,
    )
    return participation


def _minor_to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(int(value)) / Decimal(100)


class PaymentEventHandler:
    """Routes a verified Stripe event to the matching ``handle_*`` method.

    Handlers return the affected participation, a ServiceError for a
    malformed payload, or None when the event needs no action.
    """

    def __init__(self, db: Session, event: WebhookEvent):
        self.db = db
        self.event = event

    def handle(self) -> Participation | ServiceError | None:
        handler_method = getattr(self, f"handle_{self.event.type.replace('.', '_')}", self.handle_unknown_event)
        return handler_method(self.event)

    def handle_unknown_event(self, event: WebhookEvent) -> None:
        logger.info("Unhandled webhook event %s (%s)", event.type, event.id)
        return None

    def handle_checkout_session_completed(self, event: WebhookEvent) -> Participation | ServiceError | None:
        session = event.data.object
        session_id = session.id
        if session.payment_status not in PAID_SESSION_STATUSES:
            logger.warning("Checkout session %s not paid (payment_status=%s)",
                           session_id, session.payment_status)
            return None

        metadata = session.metadata or {}
        if not metadata.get("eventId") or not metadata.get("userId"):
            logger.warning("Checkout session %s is missing eventId/userId metadata", session_id)
            return BadRequest("Missing eventId or userId in session metadata")

        payment_intent = session.payment_intent
        if isinstance(payment_intent, PaymentIntentRef):
            payment_intent = payment_intent.id
        return self._record(metadata, session.amount_total,
                            transaction_id=payment_intent or session_id,
                            checkout_session_id=session_id)

    def handle_payment_intent_succeeded(self, event: WebhookEvent) -> Participation | ServiceError | None:
        intent = event.data.object
        metadata = intent.metadata or {}
        if not metadata.get("eventId") or not metadata.get("userId"):
            # Intents created by checkout carry their metadata on the session
            logger.info("Payment intent %s has no RSVP metadata; ignored", intent.id)
            return None
        return self._record(metadata, intent.amount_received, transaction_id=intent.id)

    def _record(self, metadata: dict, amount_minor: Any, transaction_id: Optional[str],
                checkout_session_id: Optional[str] = None) -> Participation | ServiceError:
        event_id = parse_positive_id(metadata.get("eventId"), "eventId")
        if isinstance(event_id, ServiceError):
            return event_id
        user_id = parse_positive_id(metadata.get("userId"), "userId")
        if isinstance(user_id, ServiceError):
            return user_id
        quantity = None
        if metadata.get("quantity") not in (None, ""):
            quantity = parse_positive_id(metadata["quantity"], "quantity")
            if isinstance(quantity, ServiceError):
                return quantity

        try:
            amount = _minor_to_decimal(amount_minor)
        except (TypeError, ValueError):
            return BadRequest("Invalid payment amount")

        result = on_payment_succeeded(
            self.db,
            event_id=event_id,
            user_id=user_id,
            ticket_quantity=quantity,
            amount=amount,
            transaction_id=transaction_id,
            checkout_session_id=checkout_session_id,
        )
        if isinstance(result, NotFound):
            return BadRequest(result.message)
        return result
