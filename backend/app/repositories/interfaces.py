# backend/app/repositories/interfaces.py
"""
Capability-scoped repository interfaces for the booking engine.

Each collaborator depends only on the narrow capability it uses. A single
concrete implementation (BookingRepository) satisfies all of them, which
keeps one session and one transaction underneath while letting tests fake
each capability in isolation.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from ..models.booking import Booking, BookingSession
    from ..models.service import Schedule, Service
    from ..models.user import Child
    from ..models.vendor import Coach


@runtime_checkable
class OwnershipReader(Protocol):
    """Point lookups that gate a booking on ownership and service state."""

    def get_child_for_parent(self, child_id: int, parent_id: int) -> Optional["Child"]:
        ...

    def get_active_service(self, service_id: int) -> Optional["Service"]:
        ...

    def get_vendor_coach(self, coach_id: int, vendor_id: int) -> Optional["Coach"]:
        ...


@runtime_checkable
class SlotLedger(Protocol):
    """Capacity bookkeeping for (schedule, date) slots."""

    def lock_active_schedule(self, schedule_id: int) -> Optional["Schedule"]:
        """Return the active schedule row holding an exclusive row lock on it."""
        ...

    def count_active_sessions(self, schedule_id: int, session_date: date) -> int:
        """Count sessions holding a seat (not cancelled / no_show) on the slot."""
        ...


@runtime_checkable
class BookingWriter(Protocol):
    def create_booking(self, **fields: Any) -> "Booking":
        ...

    def create_sessions(
        self, booking_id: int, sessions: Sequence[Mapping[str, Any]]
    ) -> list["BookingSession"]:
        ...


@runtime_checkable
class NameLookup(Protocol):
    """Display names used to enrich confirmations and booking details."""

    def get_service_name(self, service_id: int) -> Optional[str]:
        ...

    def get_child_name(self, child_id: int) -> Optional[str]:
        ...

    def get_coach_name(self, coach_id: int) -> Optional[str]:
        ...

    def get_vendor_name(self, vendor_id: int) -> Optional[str]:
        ...


@runtime_checkable
class BookingReader(Protocol):
    def get_booking_with_sessions(self, booking_id: int) -> Optional["Booking"]:
        ...


@runtime_checkable
class TransactionBounds(Protocol):
    def apply_lock_timeout(self, seconds: float) -> None:
        """Bound lock waits inside the current transaction (no-op where unsupported)."""
        ...
