# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the booking platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Error classes fall into four kinds:
- validation: malformed or inconsistent request, never retried (400)
- not-found / ownership: entity absent or not owned, never retried
- conflict: slot contention or storage-detected serialization failure;
  the retryable ones drive the booking retry loop
- internal: storage/transport failure (500)
"""

from datetime import date
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .config import settings


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    retryable: bool = False


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class DeadlineExceededException(DomainException):
    """Raised when a request runs out of time before the work could finish."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or "The request took too long. Please retry.",
            code="DEADLINE_EXCEEDED",
            details=details or {},
        )

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"message": self.message, "code": self.code, "details": self.details},
            headers={"Retry-After": "2"},
        )


# Booking validation


class InvalidBookingTypeException(ValidationException):
    def __init__(self, booking_type: object):
        super().__init__(
            message=f"Invalid booking type: {booking_type}",
            code="INVALID_BOOKING_TYPE",
            details={"booking_type": str(booking_type)},
        )


class SessionCountMismatchException(ValidationException):
    def __init__(self, booking_type: str, expected: int, received: int):
        super().__init__(
            message=f"booking_type {booking_type} requires {expected} sessions, got {received}",
            code="SESSION_COUNT_MISMATCH",
            details={"booking_type": booking_type, "expected": expected, "received": received},
        )


class PastDateBookingException(ValidationException):
    def __init__(self, session_index: int, session_date: Optional[date] = None):
        super().__init__(
            message=f"session {session_index}: cannot book sessions in the past",
            code="PAST_DATE_BOOKING",
            details={
                "session_index": session_index,
                "session_date": session_date.isoformat() if session_date else None,
            },
        )


class PriceUnavailableException(ValidationException):
    def __init__(self, booking_type: str):
        super().__init__(
            message=f"{booking_type.replace('_', ' ').capitalize()} price not available for this service",
            code="PRICE_UNAVAILABLE",
            details={"booking_type": booking_type},
        )


# Booking not-found / ownership


class ChildNotOwnedException(NotFoundException):
    """
    The child does not exist or belongs to another parent.

    Rendered as 404 by default so callers cannot probe for other families'
    children; product policy may switch it to 403.
    """

    def __init__(self, child_id: int):
        super().__init__(
            message="Child not found or does not belong to parent",
            code="CHILD_NOT_OWNED",
            details={"child_id": child_id},
        )

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return int(settings.child_ownership_status_code)


class ServiceUnavailableException(NotFoundException):
    def __init__(self, service_id: int):
        super().__init__(
            message="Service not found or inactive",
            code="SERVICE_UNAVAILABLE",
            details={"service_id": service_id},
        )


class CoachNotFoundException(NotFoundException):
    """The preferred coach does not exist or does not work for the service's vendor."""

    def __init__(self, coach_id: int):
        super().__init__(
            message="Preferred coach not found for this service",
            code="COACH_NOT_FOUND",
            details={"coach_id": coach_id},
        )


class ScheduleNotFoundException(NotFoundException):
    def __init__(self, session_index: int, schedule_id: int):
        super().__init__(
            message=f"Session {session_index}: schedule not found or inactive",
            code="SCHEDULE_NOT_FOUND",
            details={"session_index": session_index, "schedule_id": schedule_id},
        )


class BookingNotFoundException(NotFoundException):
    def __init__(self, booking_id: int):
        super().__init__(
            message="Booking not found",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


# Booking conflicts


class SlotConflictException(ConflictException):
    """A requested (schedule, date) slot has no remaining capacity."""

    retryable = True

    def __init__(self, session_index: int, session_date: date, schedule_id: int):
        self.session_index = session_index
        self.session_date = session_date
        self.schedule_id = schedule_id
        super().__init__(
            message=f"Session {session_index}: no available slots for {session_date.isoformat()}",
            code="SLOT_CONFLICT",
            details={
                "session_index": session_index,
                "session_date": session_date.isoformat(),
                "schedule_id": schedule_id,
            },
        )


class StorageConflictException(ConflictException):
    """The database detected contention (serialization failure, deadlock, lock timeout)."""

    retryable = True

    def __init__(self, message: str, *, reason: str):
        super().__init__(message=message, code="STORAGE_CONFLICT", details={"reason": reason})


class BookingConflictException(ConflictException):
    """Raised when a booking still conflicts after every retry was spent."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message
            or "Booking failed due to concurrent reservations. Please try again.",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


# PostgreSQL SQLSTATEs that signal contention rather than a broken request
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
LOCK_NOT_AVAILABLE = "55P03"

_CONFLICT_SQLSTATES = {
    SERIALIZATION_FAILURE: "serialization_failure",
    DEADLOCK_DETECTED: "deadlock",
    LOCK_NOT_AVAILABLE: "lock_timeout",
}


def classify_db_conflict(exc: BaseException) -> Optional[str]:
    """
    Return the contention reason for a storage error, or None if it is not one.

    Looks at the DBAPI SQLSTATE first and falls back to message sniffing for
    drivers that do not expose it.
    """
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode in _CONFLICT_SQLSTATES:
        return _CONFLICT_SQLSTATES[pgcode]

    message = str(exc).lower()
    if "deadlock detected" in message:
        return "deadlock"
    if "could not serialize access" in message:
        return "serialization_failure"
    if "lock timeout" in message or "canceling statement due to lock timeout" in message:
        return "lock_timeout"
    return None


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """
    Check if an exception indicates DB connection pool exhaustion.

    This is a common failure mode under high load when all database
    connections are in use and new requests time out waiting.
    """
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )
