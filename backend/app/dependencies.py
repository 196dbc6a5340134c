"""Shared FastAPI dependencies."""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services.errors import ServiceError, unwrap
from app.services.rsvp_rules import parse_positive_id

logger = logging.getLogger(__name__)


def get_acting_user(
    x_user_id: Optional[str] = Header(None, description="ID of the authenticated user"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the X-User-Id header.

    Session handling lives in front of this service; all it forwards is the
    authenticated user's id.
    """
    user_id = parse_positive_id(x_user_id, "user id")
    user = None if isinstance(user_id, ServiceError) else db.get(User, user_id)
    if user is None:
        logger.info("Rejected request with X-User-Id=%r", x_user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def path_id(raw: str, name: str) -> int:
    """Parse a positive integer identifier or answer 400."""
    return unwrap(parse_positive_id(raw, name))
