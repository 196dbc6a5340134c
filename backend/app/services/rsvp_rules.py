"""Pure RSVP predicates — host authorization, capacity and id parsing.

Nothing here touches the database; the services call these against the rows
they loaded and then re-check capacity atomically when writing.
"""
from typing import Any, Optional

from app.models.event import Event
from app.services.errors import BadRequest, CapacityExceeded

CAPACITY_EXCEEDED_MESSAGE = "Approving this application would exceed event capacity"

# Largest value an Integer primary key column can hold
MAX_ID = 2**31 - 1


def effective_quantity(ticket_quantity: Optional[int]) -> int:
    """A missing ticket quantity always counts as one ticket."""
    return ticket_quantity if ticket_quantity else 1


def is_event_host(event: Event, acting_user_id: int) -> bool:
    return event.host_id == acting_user_id


def can_approve(event: Event, requested_ticket_quantity: Optional[int]) -> bool:
    """True when the event has room for ``requested_ticket_quantity`` more tickets."""
    if event.capacity is None:
        return True
    current = event.attending_count or 0
    return current + effective_quantity(requested_ticket_quantity) <= event.capacity


def capacity_exceeded(event: Event, requested_ticket_quantity: Optional[int],
                      message: str = CAPACITY_EXCEEDED_MESSAGE) -> CapacityExceeded:
    return CapacityExceeded(
        message=message,
        current_capacity=event.attending_count or 0,
        max_capacity=event.capacity,
        requested_tickets=effective_quantity(requested_ticket_quantity),
    )


def parse_positive_id(raw: Any, name: str) -> int | BadRequest:
    """Parse a path/query identifier, rejecting anything but a positive integer."""
    text = str(raw).strip() if raw is not None else ""
    if not (text.isascii() and text.isdecimal()):
        return BadRequest(f"Invalid {name}: must be a positive integer")
    digits = text.lstrip("0") or "0"
    # Length check first: int() refuses very long digit strings
    if len(digits) > len(str(MAX_ID)) or int(digits) > MAX_ID:
        return BadRequest(f"Invalid {name}: too large")
    if int(digits) < 1:
        return BadRequest(f"Invalid {name}: must be a positive integer")
    return int(digits)
