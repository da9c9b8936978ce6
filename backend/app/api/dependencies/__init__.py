# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_parent
from .database import get_db
from .services import get_booking_service

__all__ = [
    # Auth
    "get_current_parent",
    # Database
    "get_db",
    # Services
    "get_booking_service",
]
