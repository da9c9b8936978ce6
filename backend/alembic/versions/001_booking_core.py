# backend/alembic/versions/001_booking_core.py
"""Booking core - accounts, services, schedules, bookings and sessions

Revision ID: 001_booking_core
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates every table the booking engine reads or writes. Slot capacity is
never stored as a counter: it is derived by counting booking_sessions per
(schedule_id, session_date), so that pair is indexed.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_booking_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create booking core tables."""
    print("Creating booking core tables...")

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="parent"),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'parent', 'vendor')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "children",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "parent_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_children_parent_id", "children", ["parent_id"])

    op.create_table(
        "vendors",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("business_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *_timestamps(),
    )

    op.create_table(
        "coaches",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("vendor_id", sa.BigInteger(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_coaches_vendor_id", "coaches", ["vendor_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("vendor_id", sa.BigInteger(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("price_per_session", sa.Numeric(12, 2), nullable=False),
        sa.Column("trial_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("package_4_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("package_8_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("package_12_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("price_per_session >= 0", name="ck_services_price_non_negative"),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'draft')", name="ck_services_status"
        ),
    )
    op.create_index("ix_services_vendor_id", "services", ["vendor_id"])
    op.create_index("ix_services_status", "services", ["status"])

    op.create_table(
        "schedules",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("service_id", sa.BigInteger(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("coach_id", sa.BigInteger(), sa.ForeignKey("coaches.id"), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("available_slots", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedules_day_of_week"),
        sa.CheckConstraint("available_slots >= 0", name="ck_schedules_capacity_non_negative"),
    )
    op.create_index("ix_schedules_service_id", "schedules", ["service_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("booking_number", sa.String(32), nullable=False),
        sa.Column("parent_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("child_id", sa.BigInteger(), sa.ForeignKey("children.id"), nullable=False),
        sa.Column("service_id", sa.BigInteger(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("vendor_id", sa.BigInteger(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column(
            "preferred_coach_id", sa.BigInteger(), sa.ForeignKey("coaches.id"), nullable=True
        ),
        sa.Column("booking_type", sa.String(20), nullable=False),
        sa.Column("total_sessions", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("parent_notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("booking_number", name="uq_bookings_booking_number"),
        sa.CheckConstraint("total_amount >= 0", name="ck_bookings_amount_non_negative"),
        sa.CheckConstraint("total_sessions > 0", name="ck_bookings_sessions_positive"),
        sa.CheckConstraint(
            "booking_type IN ('trial', 'single', 'package_4', 'package_8', 'package_12')",
            name="ck_bookings_type",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
    )
    op.create_index("ix_bookings_parent_id", "bookings", ["parent_id"])
    op.create_index("ix_bookings_child_id", "bookings", ["child_id"])
    op.create_index("ix_bookings_service_id", "bookings", ["service_id"])
    op.create_index("ix_bookings_vendor_id", "bookings", ["vendor_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    op.create_table(
        "booking_sessions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.BigInteger(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("schedule_id", sa.BigInteger(), sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("coach_id", sa.BigInteger(), sa.ForeignKey("coaches.id"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'no_show')",
            name="ck_booking_sessions_status",
        ),
    )
    op.create_index("ix_booking_sessions_booking_id", "booking_sessions", ["booking_id"])
    op.create_index(
        "ix_booking_sessions_schedule_date", "booking_sessions", ["schedule_id", "session_date"]
    )

    print("Booking core tables created successfully!")


def downgrade() -> None:
    """Drop booking core tables."""
    print("Dropping booking core tables...")

    op.drop_index("ix_booking_sessions_schedule_date", table_name="booking_sessions")
    op.drop_index("ix_booking_sessions_booking_id", table_name="booking_sessions")
    op.drop_table("booking_sessions")

    for index_name in (
        "ix_bookings_status",
        "ix_bookings_vendor_id",
        "ix_bookings_service_id",
        "ix_bookings_child_id",
        "ix_bookings_parent_id",
    ):
        op.drop_index(index_name, table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_schedules_service_id", table_name="schedules")
    op.drop_table("schedules")
    op.drop_index("ix_services_status", table_name="services")
    op.drop_index("ix_services_vendor_id", table_name="services")
    op.drop_table("services")
    op.drop_index("ix_coaches_vendor_id", table_name="coaches")
    op.drop_table("coaches")
    op.drop_table("vendors")
    op.drop_index("ix_children_parent_id", table_name="children")
    op.drop_table("children")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    print("Booking core tables dropped successfully!")
