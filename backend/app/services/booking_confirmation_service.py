"""
Booking Confirmation Builder.

Turns a committed booking into the confirmation shown to the parent. Name
lookups are best-effort: the booking already exists, so a lookup that fails
leaves its field empty instead of failing the request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional

from ..repositories.interfaces import NameLookup
from ..schemas.booking import BookingConfirmation, SessionConfirmation

if TYPE_CHECKING:
    from ..models.booking import Booking, BookingSession

logger = logging.getLogger(__name__)


class BookingConfirmationBuilder:
    def __init__(self, names: NameLookup):
        self.names = names

    def build(
        self, booking: "Booking", sessions: Optional[Iterable["BookingSession"]] = None
    ) -> BookingConfirmation:
        """Confirmation with service, child and per-session coach names."""
        rows = list(sessions if sessions is not None else booking.sessions)
        coach_names = self.coach_names(row.coach_id for row in rows)

        return BookingConfirmation(
            booking_id=booking.id,
            booking_number=booking.booking_number,
            service_name=self.lookup("service", self.names.get_service_name, booking.service_id)
            or "",
            child_name=self.lookup("child", self.names.get_child_name, booking.child_id) or "",
            booking_type=booking.booking_type,
            total_sessions=booking.total_sessions,
            total_amount=booking.total_amount,
            status=booking.status,
            created_at=booking.created_at,
            sessions=[
                SessionConfirmation(
                    session_date=row.session_date,
                    start_time=row.start_time,
                    end_time=row.end_time,
                    coach_name=coach_names.get(row.coach_id) if row.coach_id else None,
                )
                for row in rows
            ],
        )

    @staticmethod
    def minimal(booking: "Booking") -> BookingConfirmation:
        """Ids, amounts and status only; needs no further reads."""
        return BookingConfirmation(**booking.to_dict())

    def coach_names(self, coach_ids: Iterable[Optional[int]]) -> Dict[int, Optional[str]]:
        """Resolve each distinct coach once."""
        resolved: Dict[int, Optional[str]] = {}
        for coach_id in coach_ids:
            if coach_id is None or coach_id in resolved:
                continue
            resolved[coach_id] = self.lookup("coach", self.names.get_coach_name, coach_id)
        return resolved

    @staticmethod
    def lookup(
        kind: str, fetch: Callable[[int], Optional[str]], entity_id: Optional[int]
    ) -> Optional[str]:
        if entity_id is None:
            return None
        try:
            return fetch(entity_id)
        except Exception as e:
            logger.warning(
                f"Could not load {kind} name for confirmation: {str(e)}",
                extra={"kind": kind, "entity_id": entity_id},
            )
            return None

