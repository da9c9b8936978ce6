# backend/app/services/booking_service.py
"""
Booking Service for the kids' activity booking platform

Handles booking creation under concurrent slot contention:
- Validating the request before any transaction opens
- Ownership and service-state checks
- Reserving slots under row locks (SlotReservationGuard)
- Pricing and booking-number generation
- Persisting the booking and all of its sessions atomically
- Retrying the whole transaction on conflict-class errors
- Building the confirmation (best-effort, after commit)

Also serves the booking detail view for the owning parent.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
import logging
import re
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.booking_number import generate_booking_number
from ..core.enums import BookingType
from ..core.exceptions import (
    BookingConflictException,
    BookingNotFoundException,
    ChildNotOwnedException,
    CoachNotFoundException,
    ConflictException,
    DeadlineExceededException,
    ForbiddenException,
    InvalidBookingTypeException,
    PastDateBookingException,
    ServiceUnavailableException,
    SessionCountMismatchException,
    ValidationException,
)
from ..models.booking import BookingStatus, SessionStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import (
    BookingConfirmation,
    BookingCreate,
    BookingDetail,
    BookingSessionDetail,
)
from .base import BaseService
from .booking_confirmation_service import BookingConfirmationBuilder
from .booking_retry import BookingRetryPolicy, is_retryable_conflict
from .pricing_service import resolve_amount
from .slot_reservation_guard import RequestedSession, SlotReservationGuard

if TYPE_CHECKING:
    from ..models.booking import Booking, BookingSession
    from ..principal import ParentPrincipal
    from ..repositories.booking_repository import BookingRepository

logger = logging.getLogger(__name__)

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _today() -> date:
    return datetime.now(timezone.utc).date()


class BookingService(BaseService):
    """
    Service layer for booking operations.

    The repository, retry policy, sleep and clock are injectable so the
    retry loop can be exercised without real delays.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional["BookingRepository"] = None,
        retry_policy: Optional[BookingRetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize booking service with its repository and retry policy."""
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.retry_policy = retry_policy or BookingRetryPolicy.from_settings()
        self.slot_guard = SlotReservationGuard(self.repository)
        self.confirmations = BookingConfirmationBuilder(self.repository)
        self._sleep = sleep
        self._clock = clock

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        principal: "ParentPrincipal",
        booking_data: BookingCreate,
        *,
        deadline: Optional[float] = None,
    ) -> BookingConfirmation:
        """
        Create a booking and all of its sessions in one transaction.

        Args:
            principal: The authenticated parent
            booking_data: Validated request payload
            deadline: Absolute ``time.monotonic()`` value after which no
                attempt or retry may start

        Returns:
            Confirmation for the committed booking

        Raises:
            ValidationException: Invalid type, session count, or dates
            NotFoundException: Child not owned, service unavailable, schedule missing
            BookingConflictException: Still conflicting after every attempt
            DeadlineExceededException: Ran out of time before finishing
        """
        self.log_operation(
            "create_booking",
            parent_id=principal.id,
            child_id=booking_data.child_id,
            service_id=booking_data.service_id,
            booking_type=booking_data.booking_type,
            session_count=len(booking_data.session_dates),
        )

        # 1. Fail fast, before any lock is taken
        booking_type, requested = self._validate_request(booking_data)

        # 2. Transactional body, retried on conflict
        booking, sessions = self._create_with_retry(
            principal, booking_data, booking_type, requested, deadline
        )

        # 3. Post-commit enrichment never fails a committed booking
        try:
            return self.confirmations.build(booking, sessions)
        except Exception as e:
            self.logger.warning(
                f"Returning minimal confirmation for booking {booking.id}: {str(e)}",
                extra={"booking_id": booking.id},
            )
            return self.confirmations.minimal(booking)

    def _validate_request(
        self, booking_data: BookingCreate
    ) -> Tuple[BookingType, List[RequestedSession]]:
        booking_type = BookingType.parse(booking_data.booking_type)
        if booking_type is None:
            raise InvalidBookingTypeException(booking_data.booking_type)

        expected = booking_type.session_count
        received = len(booking_data.session_dates)
        if received != expected:
            raise SessionCountMismatchException(booking_type.value, expected, received)

        today = _today()
        requested: List[RequestedSession] = []
        for index, item in enumerate(booking_data.session_dates, start=1):
            session_date = self._parse_session_date(index, item.session_date)
            if session_date <= today:
                raise PastDateBookingException(index, session_date)
            requested.append(
                RequestedSession(schedule_id=item.schedule_id, session_date=session_date)
            )
        return booking_type, requested

    @staticmethod
    def _parse_session_date(index: int, raw: str) -> date:
        try:
            if not DATE_ONLY_REGEX.fullmatch(raw):
                raise ValueError(raw)
            return date.fromisoformat(raw)
        except ValueError:
            raise ValidationException(
                f"session {index}: invalid date format, expected YYYY-MM-DD",
                code="INVALID_SESSION_DATE",
                details={"session_index": index, "session_date": raw},
            ) from None

    def _create_with_retry(
        self,
        principal: "ParentPrincipal",
        booking_data: BookingCreate,
        booking_type: BookingType,
        requested: Sequence[RequestedSession],
        deadline: Optional[float],
    ) -> Tuple["Booking", List["BookingSession"]]:
        attempt = 0
        while True:
            attempt += 1
            self._ensure_time_left(deadline, attempt)
            try:
                return self._run_booking_transaction(
                    principal, booking_data, booking_type, requested, deadline
                )
            except ConflictException as conflict:
                if not is_retryable_conflict(conflict):
                    raise

                if not self.retry_policy.should_retry(attempt):
                    self.logger.warning(
                        f"Booking conflict persisted after {attempt} attempts: {conflict.message}",
                        extra={"parent_id": principal.id, "attempts": attempt},
                    )
                    prometheus_metrics.record_booking_conflict()
                    raise BookingConflictException(
                        details={"attempts": attempt, "last_error": conflict.details}
                    ) from conflict

                delay = self.retry_policy.delay_for(attempt)
                self._ensure_time_left(deadline, attempt + 1, upcoming_sleep=delay)
                prometheus_metrics.record_booking_retry(_conflict_reason(conflict))
                self.logger.warning(
                    f"Booking attempt {attempt} conflicted ({conflict.code}); "
                    f"retrying in {delay * 1000:.0f}ms",
                    extra={"parent_id": principal.id, "attempt": attempt, "delay": delay},
                )
                self._sleep(delay)

    def _run_booking_transaction(
        self,
        principal: "ParentPrincipal",
        booking_data: BookingCreate,
        booking_type: BookingType,
        requested: Sequence[RequestedSession],
        deadline: Optional[float],
    ) -> Tuple["Booking", List["BookingSession"]]:
        with self.transaction():
            if deadline is not None:
                self.repository.apply_lock_timeout(self._remaining(deadline))

            child = self.repository.get_child_for_parent(booking_data.child_id, principal.id)
            if child is None:
                raise ChildNotOwnedException(booking_data.child_id)

            service = self.repository.get_active_service(booking_data.service_id)
            if service is None:
                raise ServiceUnavailableException(booking_data.service_id)

            coach_id = booking_data.preferred_coach
            if coach_id is not None and (
                self.repository.get_vendor_coach(coach_id, service.vendor_id) is None
            ):
                raise CoachNotFoundException(coach_id)

            reserved = self.slot_guard.reserve(requested, service_id=service.id)
            total_amount = resolve_amount(service, booking_type)

            booking = self.repository.create_booking(
                booking_number=generate_booking_number(),
                parent_id=principal.id,
                child_id=child.id,
                service_id=service.id,
                vendor_id=service.vendor_id,
                booking_type=booking_type.value,
                total_sessions=len(reserved),
                total_amount=total_amount,
                status=BookingStatus.PENDING.value,
                preferred_coach_id=coach_id,
                parent_notes=booking_data.parent_notes,
                version=1,
            )
            sessions = self.repository.create_sessions(
                booking.id,
                [
                    {
                        "schedule_id": slot.schedule.id,
                        "session_date": slot.session_date,
                        "start_time": slot.schedule.start_time,
                        "end_time": slot.schedule.end_time,
                        "coach_id": slot.schedule.coach_id,
                        "status": SessionStatus.SCHEDULED.value,
                    }
                    for slot in reserved
                ],
            )

        self.logger.info(
            f"Booking {booking.booking_number} created with {len(sessions)} sessions",
            extra={"booking_id": booking.id, "parent_id": principal.id},
        )
        return booking, sessions

    def _remaining(self, deadline: float) -> float:
        return deadline - self._clock()

    def _ensure_time_left(
        self, deadline: Optional[float], attempt: int, upcoming_sleep: float = 0.0
    ) -> None:
        if deadline is None:
            return
        remaining = self._remaining(deadline)
        if remaining <= upcoming_sleep:
            self.logger.warning(
                f"Booking deadline reached before attempt {attempt}",
                extra={"attempt": attempt, "remaining": remaining},
            )
            raise DeadlineExceededException(details={"attempt": attempt})

    @BaseService.measure_operation("get_booking")
    def get_booking(self, principal: "ParentPrincipal", booking_id: int) -> BookingDetail:
        """
        Booking detail for its parent.

        Raises:
            BookingNotFoundException: No booking with that id
            ForbiddenException: The booking belongs to another parent
        """
        booking = self.repository.get_booking_with_sessions(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        if booking.parent_id != principal.id:
            raise ForbiddenException(
                "You do not have access to this booking",
                code="BOOKING_ACCESS_DENIED",
                details={"booking_id": booking_id},
            )

        lookup = self.confirmations.lookup
        coach_names = self.confirmations.coach_names(row.coach_id for row in booking.sessions)
        sessions = [
            BookingSessionDetail(
                id=row.id,
                session_number=number,
                schedule_id=row.schedule_id,
                session_date=row.session_date,
                start_time=row.start_time,
                end_time=row.end_time,
                status=row.status,
                coach_id=row.coach_id,
                coach_name=coach_names.get(row.coach_id) if row.coach_id else None,
            )
            for number, row in enumerate(booking.sessions, start=1)
        ]

        return BookingDetail(
            booking_id=booking.id,
            booking_number=booking.booking_number,
            parent_id=booking.parent_id,
            child_id=booking.child_id,
            child_name=lookup("child", self.repository.get_child_name, booking.child_id) or "",
            service_id=booking.service_id,
            service_name=lookup("service", self.repository.get_service_name, booking.service_id)
            or "",
            vendor_id=booking.vendor_id,
            vendor_name=lookup("vendor", self.repository.get_vendor_name, booking.vendor_id) or "",
            booking_type=booking.booking_type,
            total_sessions=booking.total_sessions,
            completed_sessions=sum(
                1 for s in sessions if s.status == SessionStatus.COMPLETED.value
            ),
            total_amount=booking.total_amount,
            status=booking.status,
            preferred_coach_id=booking.preferred_coach_id,
            parent_notes=booking.parent_notes,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            sessions=sessions,
            next_session=_next_session(sessions, _today()),
        )


def _next_session(
    sessions: Sequence[BookingSessionDetail], today: date
) -> Optional[BookingSessionDetail]:
    upcoming = [
        s for s in sessions if s.status == SessionStatus.SCHEDULED.value and s.session_date > today
    ]
    return min(upcoming, key=lambda s: (s.session_date, s.start_time), default=None)


def _conflict_reason(conflict: ConflictException) -> str:
    return str(conflict.details.get("reason") or conflict.code).lower()
