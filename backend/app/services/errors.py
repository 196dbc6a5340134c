"""Typed results for expected failures at the service boundary.

Services return one of these instead of raising, so callers can branch on
``isinstance(result, ServiceError)``. Routers turn them into HTTP errors with
:func:`to_http_exception`. Infrastructure failures still raise.
"""
from dataclasses import dataclass
from typing import Any, ClassVar

from fastapi import HTTPException


@dataclass(frozen=True)
class ServiceError:
    message: str
    status_code: ClassVar[int] = 500

    def detail(self) -> Any:
        return self.message


@dataclass(frozen=True)
class NotFound(ServiceError):
    status_code: ClassVar[int] = 404


@dataclass(frozen=True)
class Forbidden(ServiceError):
    status_code: ClassVar[int] = 403


@dataclass(frozen=True)
class BadRequest(ServiceError):
    status_code: ClassVar[int] = 400


@dataclass(frozen=True)
class InvalidStatus(BadRequest):
    pass


@dataclass(frozen=True)
class InvalidTransition(BadRequest):
    current_status: str


@dataclass(frozen=True)
class CapacityExceeded(BadRequest):
    current_capacity: int
    max_capacity: int
    requested_tickets: int

    def detail(self) -> Any:
        return {
            "error": self.message,
            "currentCapacity": self.current_capacity,
            "maxCapacity": self.max_capacity,
            "requestedTickets": self.requested_tickets,
        }


def to_http_exception(error: ServiceError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.detail())


def unwrap(result: Any) -> Any:
    """Return ``result`` unchanged, raising it as HTTP if it is a ServiceError."""
    if isinstance(result, ServiceError):
        raise to_http_exception(result)
    return result
