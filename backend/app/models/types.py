# backend/app/models/types.py
"""
Custom SQLAlchemy types that work across different database backends.
"""

from sqlalchemy import BigInteger, Column, DateTime, Integer
from sqlalchemy.sql import func

# BIGINT identity on PostgreSQL; SQLite only auto-increments INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer(), "sqlite")


class TimestampMixin:
    """Mixin class for automatic timestamp tracking."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True
    )
