# backend/tests/conftest.py
"""
Pytest configuration for the booking engine test-suite.

Tests run against an in-memory SQLite database created from the model
metadata. SQLite has no row locks, so the concurrency tests that need
SELECT ... FOR UPDATE live in ``integration/test_booking_concurrency.py``
and only run when TEST_DATABASE_URL points at a PostgreSQL database.
"""

import os

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import time
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies.database import get_db
from app.core.enums import RoleName, ServiceStatus
from app.database import Base
from app.main import app
from app.models.service import Schedule, Service
from app.models.user import Child, User
from app.models.vendor import Coach, Vendor
from app.schemas.booking import BookingCreate
from tests.factories.booking_builders import auth_headers_for, session_payload, weekly_dates


@pytest.fixture(scope="session")
def test_engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db(test_engine: Engine) -> Generator[Session, None, None]:
    """Fresh schema and session for every test."""
    Base.metadata.create_all(bind=test_engine)
    TestingSessionLocal = sessionmaker(
        bind=test_engine, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client whose requests share the test session."""

    def override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(db: Session) -> SimpleNamespace:
    """
    One vendor with a coach and a swimming service, plus two parents.

    Schedules:
        open: 10 seats, coached by Coach Sam
        last_seat: 1 seat
        full: 0 seats
        inactive: switched off
    """
    parent = User(email="parent@example.com", full_name="Pat Parent", role=RoleName.PARENT.value)
    other_parent = User(
        email="other.parent@example.com", full_name="Olly Other", role=RoleName.PARENT.value
    )
    vendor_user = User(
        email="vendor@example.com", full_name="Vera Vendor", role=RoleName.VENDOR.value
    )
    db.add_all([parent, other_parent, vendor_user])
    db.flush()

    child = Child(parent_id=parent.id, name="Mia")
    other_child = Child(parent_id=other_parent.id, name="Leo")
    vendor = Vendor(user_id=vendor_user.id, business_name="Splash Academy")
    db.add_all([child, other_child, vendor])
    db.flush()

    coach = Coach(vendor_id=vendor.id, full_name="Coach Sam")
    service = Service(
        vendor_id=vendor.id,
        name="Junior Swimming",
        duration_minutes=60,
        price_per_session=Decimal("15.00"),
        trial_price=Decimal("10.00"),
        package_8_price=Decimal("100.00"),
        status=ServiceStatus.ACTIVE.value,
    )
    inactive_service = Service(
        vendor_id=vendor.id,
        name="Diving Basics",
        price_per_session=Decimal("20.00"),
        status=ServiceStatus.INACTIVE.value,
    )
    db.add_all([coach, service, inactive_service])
    db.flush()

    def schedule(slots: int, start: time, end: time, **extra: Any) -> Schedule:
        row = Schedule(
            service_id=service.id,
            day_of_week=1,
            start_time=start,
            end_time=end,
            available_slots=slots,
            **extra,
        )
        db.add(row)
        return row

    open_schedule = schedule(10, time(16, 0), time(17, 0), coach_id=coach.id)
    last_seat = schedule(1, time(17, 0), time(18, 0))
    full = schedule(0, time(18, 0), time(19, 0))
    inactive = schedule(5, time(9, 0), time(10, 0), is_active=False)
    db.commit()

    return SimpleNamespace(
        parent=parent,
        other_parent=other_parent,
        child=child,
        other_child=other_child,
        vendor=vendor,
        coach=coach,
        service=service,
        inactive_service=inactive_service,
        open_schedule=open_schedule,
        last_seat=last_seat,
        full_schedule=full,
        inactive_schedule=inactive,
    )


@pytest.fixture
def make_booking_request(catalog: SimpleNamespace) -> Callable[..., BookingCreate]:
    """
    Build a BookingCreate for the catalog's child and service.

    ``sessions`` is a list of (schedule, date) pairs; it defaults to one
    session per required slot on the open schedule, a week apart.
    """

    def _make(
        booking_type: str = "trial",
        sessions: Optional[List[Tuple[Any, Any]]] = None,
        **overrides: Any,
    ) -> BookingCreate:
        if sessions is None:
            count = {"package_4": 4, "package_8": 8, "package_12": 12}.get(booking_type, 1)
            sessions = [(catalog.open_schedule, day) for day in weekly_dates(count)]
        payload: Dict[str, Any] = {
            "child_id": catalog.child.id,
            "service_id": catalog.service.id,
            "booking_type": booking_type,
            "session_dates": session_payload(sessions),
        }
        payload.update(overrides)
        return BookingCreate(**payload)

    return _make


@pytest.fixture
def auth_headers(catalog: SimpleNamespace) -> Dict[str, str]:
    return auth_headers_for(catalog.parent.id)


@pytest.fixture
def other_parent_headers(catalog: SimpleNamespace) -> Dict[str, str]:
    return auth_headers_for(catalog.other_parent.id)
