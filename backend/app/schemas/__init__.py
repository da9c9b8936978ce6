# backend/app/schemas/__init__.py
"""
Pydantic schemas for the booking API.

Request schemas only check shape; business rules live in the services.
"""

from .base import DataResponse, Money, StandardizedModel, StrictRequestModel
from .booking import (
    BookingConfirmation,
    BookingCreate,
    BookingDetail,
    BookingSessionDetail,
    SessionConfirmation,
    SessionDateRequest,
)

__all__ = [
    # Base
    "DataResponse",
    "Money",
    "StandardizedModel",
    "StrictRequestModel",
    # Booking
    "BookingConfirmation",
    "BookingCreate",
    "BookingDetail",
    "BookingSessionDetail",
    "SessionConfirmation",
    "SessionDateRequest",
]
