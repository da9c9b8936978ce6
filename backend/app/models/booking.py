# backend/app/models/booking.py
"""
Booking and BookingSession models.

A Booking is a parent's purchase of N sessions of one service for one child.
Its sessions are created together with it, in the same transaction, and are
never partially persisted.

Capacity invariant: for any (schedule_id, session_date) pair the number of
sessions whose status is not cancelled/no_show never exceeds the schedule's
``available_slots``. Capacity is derived by counting, so the sessions table
is indexed on (schedule_id, session_date).
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from ..database import Base
from .types import BigIntId, TimestampMixin

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Set on creation
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SessionStatus(str, Enum):
    """Status of a single booked session."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Sessions in these states no longer hold a seat on their schedule.
RELEASED_SESSION_STATUSES = (SessionStatus.CANCELLED.value, SessionStatus.NO_SHOW.value)


class Booking(TimestampMixin, Base):
    """
    A parent's booking of one service for one child.

    ``version`` starts at 1 and guards future updates (optimistic concurrency).
    """

    __tablename__ = "bookings"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    booking_number = Column(String(32), nullable=False, unique=True)

    parent_id = Column(BigIntId, ForeignKey("users.id"), nullable=False, index=True)
    child_id = Column(BigIntId, ForeignKey("children.id"), nullable=False, index=True)
    service_id = Column(BigIntId, ForeignKey("services.id"), nullable=False, index=True)
    vendor_id = Column(BigIntId, ForeignKey("vendors.id"), nullable=False, index=True)
    preferred_coach_id = Column(BigIntId, ForeignKey("coaches.id"), nullable=True)

    booking_type = Column(String(20), nullable=False)
    total_sessions = Column(Integer, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    parent_notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    sessions = relationship(
        "BookingSession",
        back_populates="booking",
        order_by="BookingSession.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_bookings_amount_non_negative"),
        CheckConstraint("total_sessions > 0", name="ck_bookings_sessions_positive"),
        CheckConstraint(
            "booking_type IN ('trial', 'single', 'package_4', 'package_8', 'package_12')",
            name="ck_bookings_type",
        ),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
    )

    # Load server-generated timestamps on INSERT so responses can carry them.
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.booking_number}: parent={self.parent_id}, "
            f"child={self.child_id}, service={self.service_id}, "
            f"type={self.booking_type}, status={self.status}>"
        )

    def to_dict(self) -> dict[str, Any]:
        """Minimal representation, used when display enrichment is unavailable."""
        return {
            "booking_id": self.id,
            "booking_number": self.booking_number,
            "booking_type": self.booking_type,
            "total_sessions": self.total_sessions,
            "total_amount": self.total_amount,
            "status": self.status,
            "created_at": self.created_at,
        }


class BookingSession(TimestampMixin, Base):
    """One scheduled occurrence within a booking, booked against a schedule."""

    __tablename__ = "booking_sessions"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    booking_id = Column(
        BigIntId, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    schedule_id = Column(BigIntId, ForeignKey("schedules.id"), nullable=False)
    session_date = Column(Date, nullable=False)
    # Snapshot of the schedule's times when the session was booked
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    coach_id = Column(BigIntId, ForeignKey("coaches.id"), nullable=True)
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value)

    booking = relationship("Booking", back_populates="sessions")

    __table_args__ = (
        Index("ix_booking_sessions_schedule_date", "schedule_id", "session_date"),
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'no_show')",
            name="ck_booking_sessions_status",
        ),
    )

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return (
            f"<BookingSession {self.id}: booking={self.booking_id}, "
            f"schedule={self.schedule_id}, date={self.session_date}, status={self.status}>"
        )
