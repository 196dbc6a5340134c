"""Payment webhook route — verifies the Stripe signature before anything else."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
import stripe

from app.config import settings
from app.database import get_db
from app.schemas.webhook import WebhookAck, WebhookEvent
from app.services.errors import unwrap
from app.services.payment_service import PaymentEventHandler

logger = logging.getLogger(__name__)
router = APIRouter()


async def raw_body(request: Request) -> bytes:
    return await request.body()


@router.post("/payment", response_model=WebhookAck)
def payment_webhook(
    payload: bytes = Depends(raw_body),
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
):
    """Ingest a signed payment event and acknowledge it."""
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("Payment webhook received but STRIPE_WEBHOOK_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    body = payload.decode("utf-8", errors="replace")
    if not stripe_signature:
        logger.warning("Payment webhook without Stripe-Signature header")
        raise HTTPException(status_code=400, detail="Invalid Stripe signature")
    try:
        stripe.WebhookSignature.verify_header(
            body, stripe_signature, settings.STRIPE_WEBHOOK_SECRET, tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
        )
    except stripe.SignatureVerificationError:
        logger.warning("Payment webhook signature verification failed")
        raise HTTPException(status_code=400, detail="Invalid Stripe signature")

    try:
        event = WebhookEvent.model_validate_json(payload)
    except ValidationError:
        logger.warning("Payment webhook payload could not be parsed")
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    logger.info("Payment webhook %s received (%s)", event.id, event.type)
    unwrap(PaymentEventHandler(db, event).handle())
    return WebhookAck(received=True)
