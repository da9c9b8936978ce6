# backend/app/schemas/booking.py
"""
Booking schemas for the kids' activity booking platform.

Request DTOs only check shape. Booking-type membership, the session count
and calendar/past-date checks belong to the booking service, which reports
them as typed validation errors (400).
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_validator

from .base import Money, StandardizedModel, StrictRequestModel


class SessionDateRequest(StrictRequestModel):
    """One requested occurrence: a schedule and the date to attend it."""

    schedule_id: int = Field(..., gt=0, description="Recurring schedule to book against")
    session_date: str = Field(..., description="Date of the session (YYYY-MM-DD)")

    @field_validator("session_date", mode="before")
    @classmethod
    def _strip_date(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class BookingCreate(StrictRequestModel):
    """
    Create a booking of one service for one child.

    ``session_dates`` is kept in the order supplied; slots are reserved in
    that order and conflict messages refer to 1-based positions in it.
    """

    child_id: int = Field(..., gt=0, description="Child attending the sessions")
    service_id: int = Field(..., gt=0, description="Service being booked")
    booking_type: str = Field(
        ..., description="trial | single | package_4 | package_8 | package_12"
    )
    session_dates: List[SessionDateRequest] = Field(
        ..., description="Requested occurrences; the count must match booking_type"
    )
    preferred_coach: Optional[int] = Field(None, gt=0, description="Preferred coach, if any")
    parent_notes: Optional[str] = Field(
        None, max_length=500, description="Optional note from the parent"
    )

    @field_validator("parent_notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        """Clean up the parent notes."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class SessionConfirmation(StandardizedModel):
    session_date: date
    start_time: time
    end_time: time
    coach_name: Optional[str] = None


class BookingConfirmation(StandardizedModel):
    """Confirmation returned after a booking is created."""

    booking_id: int
    booking_number: str
    service_name: str = ""
    child_name: str = ""
    booking_type: str
    total_sessions: int
    total_amount: Money
    status: str
    created_at: Optional[datetime] = None
    sessions: List[SessionConfirmation] = Field(default_factory=list)


class BookingSessionDetail(StandardizedModel):
    id: int
    session_number: int = Field(..., description="1-based position within the booking")
    schedule_id: int
    session_date: date
    start_time: time
    end_time: time
    status: str
    coach_id: Optional[int] = None
    coach_name: Optional[str] = None


class BookingDetail(StandardizedModel):
    """Full view of a booking for its parent."""

    booking_id: int
    booking_number: str
    parent_id: int
    child_id: int
    child_name: str = ""
    service_id: int
    service_name: str = ""
    vendor_id: int
    vendor_name: str = ""
    booking_type: str
    total_sessions: int
    completed_sessions: int = 0
    total_amount: Money
    status: str
    preferred_coach_id: Optional[int] = None
    parent_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sessions: List[BookingSessionDetail] = Field(default_factory=list)
    next_session: Optional[BookingSessionDetail] = None
