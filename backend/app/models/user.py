# backend/app/models/user.py
"""
Account models consumed by the booking engine.

Accounts, children and their lifecycle are owned by the account
collaborator; the booking engine reads them for ownership checks and
confirmation display names only.
"""

import logging

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, String
from sqlalchemy.orm import relationship

from ..core.enums import RoleName
from ..database import Base
from .types import BigIntId, TimestampMixin

logger = logging.getLogger(__name__)


class User(TimestampMixin, Base):
    """A platform account. Parents are users with the ``parent`` role."""

    __tablename__ = "users"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.PARENT.value)

    children = relationship("Child", back_populates="parent", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'parent', 'vendor')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} ({self.role})>"


class Child(TimestampMixin, Base):
    """A child registered by a parent; bookings are always made for a child."""

    __tablename__ = "children"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    parent_id = Column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=True)

    parent = relationship("User", back_populates="children")

    def __repr__(self) -> str:
        return f"<Child {self.id} {self.name} parent={self.parent_id}>"
