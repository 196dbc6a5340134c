"""Tests for the pure RSVP predicates (no database)."""
from app.models.event import Event
from app.services.errors import BadRequest, CapacityExceeded
from app.services.rsvp_rules import (
    can_approve,
    capacity_exceeded,
    effective_quantity,
    is_event_host,
    parse_positive_id,
)


def _event(capacity=100, attending=0, host_id=1):
    return Event(id=7, host_id=host_id, title="Gala", capacity=capacity, attending_count=attending)


class TestCanApprove:
    """attending + requested ≤ capacity, unlimited when capacity is null."""

    def test_room_left(self):
        assert can_approve(_event(capacity=100, attending=50), 10) is True

    def test_would_overflow(self):
        assert can_approve(_event(capacity=100, attending=95), 10) is False

    def test_exact_fit(self):
        assert can_approve(_event(capacity=100, attending=90), 10) is True

    def test_unlimited(self):
        assert can_approve(_event(capacity=None, attending=10_000), 500) is True

    def test_missing_quantity_counts_as_one(self):
        assert can_approve(_event(capacity=10, attending=9), None) is True
        assert can_approve(_event(capacity=10, attending=10), None) is False

    def test_missing_attending_count_counts_as_zero(self):
        assert can_approve(_event(capacity=5, attending=None), 5) is True


class TestCapacityExceeded:
    def test_carries_numbers(self):
        error = capacity_exceeded(_event(capacity=100, attending=95), 10)
        assert isinstance(error, CapacityExceeded)
        assert error.status_code == 400
        assert error.detail() == {
            "error": "Approving this application would exceed event capacity",
            "currentCapacity": 95,
            "maxCapacity": 100,
            "requestedTickets": 10,
        }


class TestHostAndIds:
    def test_is_event_host(self):
        event = _event(host_id=3)
        assert is_event_host(event, 3) is True
        assert is_event_host(event, 4) is False

    def test_effective_quantity(self):
        assert effective_quantity(None) == 1
        assert effective_quantity(4) == 4

    def test_parse_positive_id(self):
        assert parse_positive_id("42", "eventId") == 42
        assert parse_positive_id(" 7 ", "eventId") == 7

    def test_parse_rejects_non_positive_or_non_numeric(self):
        for raw in ("0", "-1", "abc", "1.5", "", None, "١٢"):
            result = parse_positive_id(raw, "eventId")
            assert isinstance(result, BadRequest), raw
            assert result.message == "Invalid eventId: must be a positive integer"

    def test_parse_rejects_ids_beyond_integer_range(self):
        assert parse_positive_id("2147483647", "eventId") == 2147483647
        for raw in ("2147483648", "99999999999999999999", "9" * 5000):
            result = parse_positive_id(raw, "eventId")
            assert isinstance(result, BadRequest), raw
            assert result.message == "Invalid eventId: too large"

    def test_parse_ignores_leading_zeros(self):
        assert parse_positive_id("0007", "eventId") == 7
        assert isinstance(parse_positive_id("0" * 5000, "eventId"), BadRequest)
