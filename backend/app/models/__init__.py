"""
Database models for the booking engine.

The models are organized by functionality:
- Accounts (parents) and their children
- Vendors and coaches
- Services and recurring weekly schedules
- Bookings and booked sessions
"""

from .booking import Booking, BookingSession, BookingStatus, SessionStatus
from .service import Schedule, Service
from .user import Child, User
from .vendor import Coach, Vendor

__all__ = [
    # User models
    "User",
    "Child",
    # Vendor models
    "Vendor",
    "Coach",
    # Service models
    "Service",
    "Schedule",
    # Booking models
    "Booking",
    "BookingSession",
    "BookingStatus",
    "SessionStatus",
]
