# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the booking platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic read operations
- interfaces: Capability-scoped protocols the services depend on
- BookingRepository: The single implementation of the booking capabilities
- RepositoryFactory: Factory for creating repository instances

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    schedule = repository.lock_active_schedule(schedule_id)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .interfaces import (
    BookingReader,
    BookingWriter,
    NameLookup,
    OwnershipReader,
    SlotLedger,
    TransactionBounds,
)

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "RepositoryFactory",
    "OwnershipReader",
    "SlotLedger",
    "BookingWriter",
    "NameLookup",
    "BookingReader",
    "TransactionBounds",
]
