# backend/app/models/service.py
"""
Service listings and their recurring weekly schedules.

A Service carries the price table used to price bookings. A Schedule is a
recurring weekly time slot with a fixed capacity (``available_slots``).
Capacity is never decremented: remaining capacity for a given date is always
derived by counting active booking sessions against the schedule.
"""

import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from ..core.enums import ServiceStatus
from ..database import Base
from .types import BigIntId, TimestampMixin

logger = logging.getLogger(__name__)


class Service(TimestampMixin, Base):
    """
    An activity offered by a vendor.

    Attributes:
        id: Primary key
        vendor_id: Vendor offering the service
        name: Display name (e.g., "Junior Swimming")
        price_per_session: Price of a single session (always set)
        trial_price: Optional price for a one-off trial session
        package_4_price / package_8_price / package_12_price: Optional bundle prices;
            when unset a bundle is priced linearly from price_per_session
        status: active | inactive | draft; only active services are bookable
    """

    __tablename__ = "services"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    vendor_id = Column(BigIntId, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    price_per_session = Column(Numeric(12, 2), nullable=False)
    trial_price = Column(Numeric(12, 2), nullable=True)
    package_4_price = Column(Numeric(12, 2), nullable=True)
    package_8_price = Column(Numeric(12, 2), nullable=True)
    package_12_price = Column(Numeric(12, 2), nullable=True)
    status = Column(String(20), nullable=False, default=ServiceStatus.ACTIVE.value, index=True)
    version = Column(Integer, nullable=False, default=1)

    vendor = relationship("Vendor", back_populates="services")
    schedules = relationship("Schedule", back_populates="service")

    __table_args__ = (
        CheckConstraint("price_per_session >= 0", name="ck_services_price_non_negative"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'draft')", name="ck_services_status"
        ),
    )

    def __repr__(self) -> str:
        return f"<Service {self.id} {self.name} ({self.status})>"


class Schedule(TimestampMixin, Base):
    """
    Recurring weekly slot template for a service.

    day_of_week follows 0=Sunday .. 6=Saturday.
    """

    __tablename__ = "schedules"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    service_id = Column(BigIntId, ForeignKey("services.id"), nullable=False, index=True)
    coach_id = Column(BigIntId, ForeignKey("coaches.id"), nullable=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    available_slots = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    service = relationship("Service", back_populates="schedules")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedules_day_of_week"),
        CheckConstraint("available_slots >= 0", name="ck_schedules_capacity_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Schedule {self.id}: service={self.service_id} day={self.day_of_week} "
            f"{self.start_time}-{self.end_time} capacity={self.available_slots}>"
        )
