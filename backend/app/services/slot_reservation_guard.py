"""
Slot Reservation Guard.

Checks remaining capacity for every requested (schedule, date) slot while
holding an exclusive row lock on each schedule, inside the caller's open
transaction. Capacity is never stored as a counter: remaining seats are
``available_slots`` minus the sessions still holding a seat on that date.

The lock is what makes the read-count-insert sequence safe. Two requests
for the last seat serialize on the schedule row, and the second one sees
the first one's session once it commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import ScheduleNotFoundException, SlotConflictException
from ..repositories.interfaces import SlotLedger

if TYPE_CHECKING:
    from ..models.service import Schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestedSession:
    schedule_id: int
    session_date: date


@dataclass(frozen=True)
class ReservedSlot:
    """A slot the guard verified, with the locked schedule row."""

    index: int  # 1-based position in the request
    schedule: "Schedule"
    session_date: date


class SlotReservationGuard:
    """Reserve capacity for a booking's sessions under row-level locks."""

    def __init__(self, ledger: SlotLedger):
        self.ledger = ledger

    def reserve(
        self,
        requested: Sequence[RequestedSession],
        *,
        service_id: Optional[int] = None,
    ) -> List[ReservedSlot]:
        """
        Lock and check every requested slot, in the order given.

        Slots repeated within one request count against capacity together.
        Any failure aborts the whole reservation; the caller's transaction
        rollback releases the locks taken so far.

        Raises:
            ScheduleNotFoundException: schedule missing, inactive, or not part of the service
            SlotConflictException: no seat left on the slot
        """
        reserved: List[ReservedSlot] = []
        booked_counts: Dict[Tuple[int, date], int] = {}
        claimed: Dict[Tuple[int, date], int] = {}

        for index, item in enumerate(requested, start=1):
            schedule = self.ledger.lock_active_schedule(item.schedule_id)
            if schedule is None or (service_id is not None and schedule.service_id != service_id):
                raise ScheduleNotFoundException(index, item.schedule_id)

            key = (item.schedule_id, item.session_date)
            if key not in booked_counts:
                booked_counts[key] = self.ledger.count_active_sessions(
                    item.schedule_id, item.session_date
                )
            taken = booked_counts[key] + claimed.get(key, 0)
            available = schedule.available_slots - taken

            if available <= 0:
                logger.info(
                    "Slot full: schedule=%s date=%s capacity=%s taken=%s",
                    item.schedule_id,
                    item.session_date,
                    schedule.available_slots,
                    taken,
                )
                raise SlotConflictException(index, item.session_date, item.schedule_id)

            claimed[key] = claimed.get(key, 0) + 1
            reserved.append(
                ReservedSlot(index=index, schedule=schedule, session_date=item.session_date)
            )

        return reserved
