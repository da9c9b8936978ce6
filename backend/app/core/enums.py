# backend/app/core/enums.py
"""
Core enums for the booking platform.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Roles carried in access tokens.

    Only parents create and read bookings through the booking engine; the
    other roles are issued by the account collaborator.
    """

    ADMIN = "admin"
    PARENT = "parent"
    VENDOR = "vendor"


class BookingType(str, Enum):
    """How many sessions a single purchase bundles."""

    TRIAL = "trial"
    SINGLE = "single"
    PACKAGE_4 = "package_4"
    PACKAGE_8 = "package_8"
    PACKAGE_12 = "package_12"

    @property
    def session_count(self) -> int:
        return _SESSION_COUNTS[self]

    @classmethod
    def parse(cls, value: object) -> "BookingType | None":
        """Return the matching member, or None for anything that is not a booking type."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


_SESSION_COUNTS = {
    BookingType.TRIAL: 1,
    BookingType.SINGLE: 1,
    BookingType.PACKAGE_4: 4,
    BookingType.PACKAGE_8: 8,
    BookingType.PACKAGE_12: 12,
}


class ServiceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
