# backend/app/repositories/booking_repository.py
"""
Booking Repository for the kids' activity booking platform

Implements every data access operation the booking engine needs over one
SQLAlchemy session, so a single service transaction covers them all:
- ownership and service-state point lookups
- schedule row locking and slot capacity counting
- booking + session inserts
- display-name lookups for confirmations
- booking detail reads

Services depend on the capability protocols in ``interfaces`` rather than on
this class directly.
"""

from datetime import date
import logging
from typing import Any, List, Mapping, Optional, Sequence, cast

from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.enums import ServiceStatus
from ..core.exceptions import StorageConflictException
from ..database.session_utils import supports_row_locks
from ..models.booking import RELEASED_SESSION_STATUSES, Booking, BookingSession
from ..models.service import Schedule, Service
from ..models.user import Child
from ..models.vendor import Coach, Vendor
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """
    Repository for booking data access.

    Implements OwnershipReader, SlotLedger, BookingWriter, NameLookup,
    BookingReader and TransactionBounds.
    """

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Ownership

    def get_child_for_parent(self, child_id: int, parent_id: int) -> Optional[Child]:
        """Return the child only when it belongs to the parent."""
        try:
            result = (
                self.db.query(Child)
                .filter(Child.id == child_id, Child.parent_id == parent_id)
                .first()
            )
            return cast(Optional[Child], result)
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"get child {child_id}")

    def get_active_service(self, service_id: int) -> Optional[Service]:
        try:
            result = (
                self.db.query(Service)
                .filter(Service.id == service_id, Service.status == ServiceStatus.ACTIVE.value)
                .first()
            )
            return cast(Optional[Service], result)
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"get service {service_id}")

    def get_vendor_coach(self, coach_id: int, vendor_id: int) -> Optional[Coach]:
        """Return an active coach employed by the vendor."""
        try:
            result = (
                self.db.query(Coach)
                .filter(
                    Coach.id == coach_id,
                    Coach.vendor_id == vendor_id,
                    Coach.status == "active",
                )
                .first()
            )
            return cast(Optional[Coach], result)
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"get coach {coach_id}")

    # Slot ledger

    def lock_active_schedule(self, schedule_id: int) -> Optional[Schedule]:
        """
        SELECT ... FOR UPDATE on an active schedule row.

        The lock is held until the enclosing transaction ends. SQLite has no
        row locks and serializes writers at the database level instead.
        """
        try:
            result = (
                self.db.query(Schedule)
                .filter(Schedule.id == schedule_id, Schedule.is_active.is_(True))
                .populate_existing()
                .with_for_update()
                .first()
            )
            return cast(Optional[Schedule], result)
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"lock schedule {schedule_id}")

    def count_active_sessions(self, schedule_id: int, session_date: date) -> int:
        query = self.db.query(func.count(BookingSession.id)).filter(
            BookingSession.schedule_id == schedule_id,
            BookingSession.session_date == session_date,
            BookingSession.status.notin_(RELEASED_SESSION_STATUSES),
        )
        return int(self._execute_scalar(query) or 0)

    # Writes

    def create_booking(self, **fields: Any) -> Booking:
        """
        Insert a booking row and flush to obtain its id and timestamps.

        A clash on the unique booking number is contention between two
        requests generating the same number, so it is reported as a
        retryable storage conflict rather than a failure.
        """
        try:
            booking = Booking(**fields)
            self.db.add(booking)
            self.db.flush()
            return booking
        except IntegrityError as e:
            if "booking_number" in str(e.orig if e.orig is not None else e):
                self.logger.warning(
                    "Booking number collision on %s", fields.get("booking_number")
                )
                raise StorageConflictException(
                    "Booking number already in use", reason="booking_number_collision"
                ) from e
            self._raise_storage_error(e, "create booking")
        except SQLAlchemyError as e:
            self._raise_storage_error(e, "create booking")

    def create_sessions(
        self, booking_id: int, sessions: Sequence[Mapping[str, Any]]
    ) -> List[BookingSession]:
        try:
            rows = [BookingSession(booking_id=booking_id, **dict(data)) for data in sessions]
            self.db.add_all(rows)
            self.db.flush()
            return rows
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"create sessions for booking {booking_id}")

    # Reads

    def get_booking_with_sessions(self, booking_id: int) -> Optional[Booking]:
        query = (
            self.db.query(Booking)
            .options(selectinload(Booking.sessions))
            .filter(Booking.id == booking_id)
        )
        try:
            return cast(Optional[Booking], query.first())
        except SQLAlchemyError as e:
            self._raise_storage_error(e, f"get booking {booking_id}")

    # Display names

    def get_service_name(self, service_id: int) -> Optional[str]:
        return self._execute_scalar(self.db.query(Service.name).filter(Service.id == service_id))

    def get_child_name(self, child_id: int) -> Optional[str]:
        return self._execute_scalar(self.db.query(Child.name).filter(Child.id == child_id))

    def get_coach_name(self, coach_id: int) -> Optional[str]:
        return self._execute_scalar(self.db.query(Coach.full_name).filter(Coach.id == coach_id))

    def get_vendor_name(self, vendor_id: int) -> Optional[str]:
        return self._execute_scalar(
            self.db.query(Vendor.business_name).filter(Vendor.id == vendor_id)
        )

    # Transaction bounds

    def apply_lock_timeout(self, seconds: float) -> None:
        """Cap how long lock waits may block, for the rest of this transaction."""
        if not supports_row_locks(self.db):
            return
        timeout_ms = max(1, int(seconds * 1000))
        try:
            self.db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
        except SQLAlchemyError as e:
            self._raise_storage_error(e, "set lock timeout")
