# backend/app/models/vendor.py
"""Vendors (activity providers) and the coaches they employ."""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from ..database import Base
from .types import BigIntId, TimestampMixin


class Vendor(TimestampMixin, Base):
    __tablename__ = "vendors"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey("users.id"), nullable=True)
    business_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="active")

    coaches = relationship("Coach", back_populates="vendor")
    services = relationship("Service", back_populates="vendor")

    def __repr__(self) -> str:
        return f"<Vendor {self.id} {self.business_name}>"


class Coach(TimestampMixin, Base):
    __tablename__ = "coaches"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    vendor_id = Column(BigIntId, ForeignKey("vendors.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="active")

    vendor = relationship("Vendor", back_populates="coaches")

    def __repr__(self) -> str:
        return f"<Coach {self.id} {self.full_name}>"
