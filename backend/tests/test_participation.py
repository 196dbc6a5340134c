"""Tests for self-service RSVP on open events."""
from app.models.event import Event
from tests.conftest import auth_headers, create_pending_application, create_test_event, create_test_user, set_attending_count


def _open_event(client, **overrides):
    host = create_test_user(client, username="host")
    guest = create_test_user(client, username="guest")
    fields = {"requireApproval": False, "ticketType": "free", "price": None, "capacity": 3}
    fields.update(overrides)
    return host, guest, create_test_event(client, host, **fields)


def _rsvp(client, event, user, status):
    return client.post(f"/api/events/{event['id']}/participate", json={"status": status},
                       headers=auth_headers(user))


def _counts(db, event_id):
    db.expire_all()
    event = db.get(Event, event_id)
    return event.attending_count, event.interested_count


class TestSetParticipation:
    """Attending / interested / not_participating transitions and counters."""

    def test_attend(self, client, db):
        _, guest, event = _open_event(client)
        resp = _rsvp(client, event, guest, "attending")
        assert resp.status_code == 200
        assert resp.json()["status"] == "attending"
        assert resp.json()["participation"]["ticketQuantity"] == 1
        assert _counts(db, event["id"]) == (1, 0)

    def test_interested_then_attending_moves_counts(self, client, db):
        _, guest, event = _open_event(client)
        _rsvp(client, event, guest, "interested")
        assert _counts(db, event["id"]) == (0, 1)
        _rsvp(client, event, guest, "attending")
        assert _counts(db, event["id"]) == (1, 0)

    def test_cancel_releases_seat(self, client, db):
        _, guest, event = _open_event(client)
        _rsvp(client, event, guest, "attending")
        resp = _rsvp(client, event, guest, "not_participating")
        assert resp.status_code == 200
        assert resp.json()["status"] == "not_participating"
        assert _counts(db, event["id"]) == (0, 0)

    def test_cancel_without_record_is_noop(self, client, db):
        _, guest, event = _open_event(client)
        resp = _rsvp(client, event, guest, "not_participating")
        assert resp.status_code == 200
        assert resp.json() == {"status": "not_participating", "participation": None}

    def test_repeat_is_noop(self, client, db):
        _, guest, event = _open_event(client)
        _rsvp(client, event, guest, "attending")
        _rsvp(client, event, guest, "attending")
        assert _counts(db, event["id"]) == (1, 0)

    def test_full_event_refuses_attendance(self, client, db):
        _, guest, event = _open_event(client, capacity=3)
        set_attending_count(db, event["id"], 3)
        resp = _rsvp(client, event, guest, "attending")
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "This event is at capacity"
        assert resp.json()["detail"]["requestedTickets"] == 1
        assert _counts(db, event["id"]) == (3, 0)

    def test_full_event_keeps_interest_when_attend_fails(self, client, db):
        _, guest, event = _open_event(client, capacity=3)
        _rsvp(client, event, guest, "interested")
        set_attending_count(db, event["id"], 3)
        assert _rsvp(client, event, guest, "attending").status_code == 400
        assert _counts(db, event["id"]) == (3, 1)

    def test_invalid_status(self, client):
        _, guest, event = _open_event(client)
        resp = _rsvp(client, event, guest, "pending_approval")
        assert resp.status_code == 400
        assert resp.json()["detail"] == 'Invalid status value. Must be "interested", "attending", or "not_participating".'

    def test_private_event(self, client):
        _, guest, event = _open_event(client, isPrivate=True)
        assert _rsvp(client, event, guest, "interested").status_code == 400

    def test_approval_event_cannot_be_joined_directly(self, client, db):
        _, guest, event = _open_event(client, requireApproval=True)
        assert _rsvp(client, event, guest, "attending").status_code == 400
        assert _rsvp(client, event, guest, "interested").status_code == 200

    def test_paid_event_cannot_be_joined_directly(self, client):
        _, guest, event = _open_event(client, ticketType="paid", price="10.00")
        assert _rsvp(client, event, guest, "attending").status_code == 400

    def test_pending_application_is_host_managed(self, client, db):
        _, guest, event = _open_event(client, requireApproval=True)
        create_pending_application(db, event["id"], guest["id"])
        resp = _rsvp(client, event, guest, "not_participating")
        assert resp.status_code == 400
        assert "pending_approval" in resp.json()["detail"]

    def test_unknown_event(self, client):
        guest = create_test_user(client, username="guest")
        resp = client.post("/api/events/9999/participate", json={"status": "attending"},
                           headers=auth_headers(guest))
        assert resp.status_code == 404


class TestParticipationStatus:
    """GET /api/events/{eventId}/participation/status."""

    def test_defaults_to_not_participating(self, client):
        _, guest, event = _open_event(client)
        resp = client.get(f"/api/events/{event['id']}/participation/status", headers=auth_headers(guest))
        assert resp.status_code == 200
        assert resp.json() == {"status": "not_participating"}

    def test_reports_current_status(self, client):
        _, guest, event = _open_event(client)
        _rsvp(client, event, guest, "interested")
        resp = client.get(f"/api/events/{event['id']}/participation/status", headers=auth_headers(guest))
        assert resp.json() == {"status": "interested"}

    def test_requires_authentication(self, client):
        _, _, event = _open_event(client)
        resp = client.get(f"/api/events/{event['id']}/participation/status")
        assert resp.status_code == 401


class TestRequestBodyValidation:
    """Bodies that are not a JSON object are client errors."""

    def test_malformed_json(self, client):
        _, guest, event = _open_event(client)
        resp = client.post(f"/api/events/{event['id']}/participate", content="{status: attending",
                           headers={**auth_headers(guest), "Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid JSON format"

    def test_body_that_is_not_an_object(self, client, db):
        _, guest, event = _open_event(client)
        resp = client.post(f"/api/events/{event['id']}/participate", json="attending",
                           headers=auth_headers(guest))
        assert resp.status_code == 400
        assert _counts(db, event["id"]) == (0, 0)

    def test_event_id_too_large(self, client):
        guest = create_test_user(client, username="guest")
        resp = client.post("/api/events/99999999999999999999/participate", json={"status": "attending"},
                           headers=auth_headers(guest))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid eventId: too large"
