# backend/app/routes/v1/bookings.py
"""
Parent booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Create a booking (N sessions, reserved atomically)
    GET /{booking_id} - Full booking details
"""

import asyncio
import logging
import time

from fastapi import APIRouter, Depends, status
from fastapi.params import Path

from ...api.dependencies import get_booking_service, get_current_parent
from ...core.config import settings
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...principal import ParentPrincipal
from ...schemas.base import DataResponse
from ...schemas.booking import BookingConfirmation, BookingCreate, BookingDetail
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


@router.post(
    "",
    response_model=DataResponse[BookingConfirmation],
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate,
    parent: ParentPrincipal = Depends(get_current_parent),
    booking_service: BookingService = Depends(get_booking_service),
) -> DataResponse[BookingConfirmation]:
    """
    Create a booking for one of the parent's children.

    Every requested session is reserved in the same transaction; either the
    booking and all of its sessions are created or nothing is.
    """
    deadline = time.monotonic() + settings.booking_request_timeout_seconds
    try:
        confirmation = await asyncio.to_thread(
            booking_service.create_booking, parent, booking_data, deadline=deadline
        )
        return DataResponse[BookingConfirmation](data=confirmation)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=DataResponse[BookingDetail])
async def get_booking_details(
    booking_id: int = Path(..., gt=0, description="Booking id"),
    parent: ParentPrincipal = Depends(get_current_parent),
    booking_service: BookingService = Depends(get_booking_service),
) -> DataResponse[BookingDetail]:
    """Get full booking details; only the owning parent may read them."""
    try:
        detail = await asyncio.to_thread(booking_service.get_booking, parent, booking_id)
        return DataResponse[BookingDetail](data=detail)
    except DomainException as e:
        handle_domain_exception(e)
