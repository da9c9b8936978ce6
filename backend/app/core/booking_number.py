"""Booking number generation."""

from datetime import datetime, timezone
from typing import Optional


def generate_booking_number(now: Optional[datetime] = None) -> str:
    """
    Generate a human-readable booking number: ``BK-YYYYMMDD-HHMMSS-ffffff``.

    The suffix is the microsecond part of the timestamp, so two bookings
    created within the same microsecond collide. The unique constraint on
    ``bookings.booking_number`` catches that and the booking is retried with
    a fresh number.
    """
    moment = now or datetime.now(timezone.utc)
    return f"BK-{moment:%Y%m%d-%H%M%S}-{moment.microsecond:06d}"
