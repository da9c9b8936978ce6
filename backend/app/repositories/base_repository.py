# backend/app/repositories/base_repository.py
"""
Base Repository Pattern for the booking platform

Provides the foundation for all repository classes with:
- Type safety with generics
- Storage error translation (contention vs. failure)

Transactions are owned by the service layer: repositories flush but never
commit or roll back, so one service transaction can span several
repository calls and be undone as a unit.
"""

import logging
from typing import Any, Generic, NoReturn, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException, StorageConflictException, classify_db_conflict

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    # Protected helper methods for use by subclasses

    def _execute_scalar(self, query: Query) -> Any:
        """Execute scalar query with error handling."""
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self._raise_storage_error(e, "scalar query")

    def _raise_storage_error(self, exc: SQLAlchemyError, operation: str) -> NoReturn:
        """
        Re-raise a storage error as a domain error.

        Contention the database detected (deadlock, serialization failure,
        lock timeout) becomes a retryable StorageConflictException; anything
        else is a RepositoryException.
        """
        reason = classify_db_conflict(exc)
        if reason is not None:
            self.logger.warning("Storage conflict during %s: %s", operation, reason)
            raise StorageConflictException(
                f"Concurrent update detected during {operation}", reason=reason
            ) from exc
        self.logger.error("Error during %s: %s", operation, exc)
        raise RepositoryException(f"Failed to {operation}: {exc}") from exc
