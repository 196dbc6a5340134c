"""Pytest fixtures — file-backed SQLite database, rebuilt for every test."""
import os

# The app engine is built at import time; keep it off PostgreSQL in tests
os.environ["DATABASE_URL"] = "sqlite://"

import hashlib
import hmac
import json
import time
import uuid
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy import create_engine, event, update
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.config import settings
from app.database import Base, get_db
from app.main import app

# Import all models so they register with Base.metadata
from app.models.user import User                                 # noqa: F401
from app.models.event import Event
from app.models.participation import Participation
from app.models.status_change import ParticipationStatusChange   # noqa: F401
from app.services import payment_service

SQLITE_URL = "sqlite:///./test.db"
WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode so the test session and the app session can interleave
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for direct service calls and assertions."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def webhook_secret(monkeypatch):
    """Configure the Stripe webhook secret for the duration of a test."""
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    return WEBHOOK_SECRET


# ---------------------------------------------------------------------------
# Helpers: create users/events via the API, returns the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, username: str = "testuser", email: Optional[str] = None,
                     full_name: Optional[str] = "Test User") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "fullName": full_name,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(user: dict) -> dict:
    return {"X-User-Id": str(user["id"])}


def create_test_event(client: TestClient, host: dict, **overrides) -> dict:
    """Helper — POST /api/events as ``host`` and return response JSON."""
    payload = {
        "title": "Rooftop Dinner",
        "description": "Dinner with a view",
        "capacity": 100,
        "requireApproval": True,
        "ticketType": "paid",
        "price": "199.99",
    }
    payload.update(overrides)
    resp = client.post("/api/events/", json=payload, headers=auth_headers(host))
    assert resp.status_code == 201, resp.text
    return resp.json()


def set_attending_count(db, event_id: int, count: int) -> None:
    """Seed an event's attending counter directly."""
    db.execute(update(Event).where(Event.id == event_id).values(attending_count=count))
    db.commit()


def create_pending_application(db, event_id: int, user_id: int, ticket_quantity: Optional[int] = 1,
                               amount: Optional[str] = None) -> Participation:
    """Helper — record a paid application through the payment service."""
    result = payment_service.on_payment_succeeded(
        db,
        event_id=event_id,
        user_id=user_id,
        ticket_quantity=ticket_quantity,
        amount=Decimal(amount) if amount is not None else None,
        transaction_id=f"pi_{uuid.uuid4().hex}",
    )
    assert isinstance(result, Participation), result
    return result


def sign_webhook(payload: dict, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> tuple[str, dict]:
    """Serialize ``payload`` and build a Stripe-Signature header for it."""
    body = json.dumps(payload)
    ts = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(secret.encode("utf-8"), f"{ts}.{body}".encode("utf-8"), hashlib.sha256).hexdigest()
    return body, {"Stripe-Signature": f"t={ts},v1={signature}", "Content-Type": "application/json"}


def checkout_completed_event(event_id, user_id, quantity=1, amount_total=19999, payment_intent="pi_123",
                             payment_status="paid", session_id="cs_test_123") -> dict:
    """A minimal checkout.session.completed event as Stripe sends it."""
    metadata = {"eventId": str(event_id), "userId": str(user_id)}
    if quantity is not None:
        metadata["quantity"] = str(quantity)
    return {
        "id": f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": payment_status,
                "payment_intent": payment_intent,
                "amount_total": amount_total,
                "metadata": metadata,
            }
        },
    }
