"""Pydantic models for the verified payment webhook payload."""
from __future__ import annotations
from typing import Any, Optional, Union

from pydantic import BaseModel


class PaymentIntentRef(BaseModel):
    """An expanded ``payment_intent`` on a checkout session."""

    id: str

    model_config = {"extra": "allow"}


class WebhookObject(BaseModel):
    """The Stripe object an event is about; unknown fields are kept."""

    id: Optional[str] = None
    payment_status: Optional[str] = None
    payment_intent: Optional[Union[str, PaymentIntentRef]] = None
    amount_total: Optional[int] = None
    amount_received: Optional[int] = None
    metadata: Optional[dict[str, Any]] = None

    model_config = {"extra": "allow"}


class WebhookEventData(BaseModel):
    object: WebhookObject


class WebhookEvent(BaseModel):
    id: str
    type: str
    data: WebhookEventData


class WebhookAck(BaseModel):
    received: bool = True
