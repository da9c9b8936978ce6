"""HTTP contract of /api/v1/bookings."""

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, Generator, List

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.booking import Booking
from tests.factories.booking_builders import (
    auth_headers_for,
    count_rows,
    future_date,
    occupy_slot,
    session_payload,
    weekly_dates,
)

BOOKINGS_URL = "/api/v1/bookings"


@pytest.fixture
def enforce_foreign_keys(db: Session, catalog: SimpleNamespace) -> Generator[None, None, None]:
    """Make SQLite enforce foreign keys the way PostgreSQL does."""
    db.commit()
    db.execute(text("PRAGMA foreign_keys=ON"))
    yield
    db.rollback()
    db.execute(text("PRAGMA foreign_keys=OFF"))


def _payload(catalog: SimpleNamespace, booking_type: str = "trial", **overrides: Any) -> Dict:
    count = {"package_4": 4, "package_8": 8, "package_12": 12}.get(booking_type, 1)
    payload: Dict[str, Any] = {
        "child_id": catalog.child.id,
        "service_id": catalog.service.id,
        "booking_type": booking_type,
        "session_dates": session_payload(
            [(catalog.open_schedule, day) for day in weekly_dates(count)]
        ),
    }
    payload.update(overrides)
    return payload


class TestCreateBookingRoute:
    def test_creates_booking(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog, parent_notes="  Mia is a beginner  "),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["booking_number"].startswith("BK-")
        assert data["booking_type"] == "trial"
        assert data["total_amount"] == 10.0
        assert data["status"] == "pending"
        assert data["service_name"] == "Junior Swimming"
        assert data["child_name"] == "Mia"
        assert data["created_at"] is not None
        assert data["sessions"] == [
            {
                "session_date": weekly_dates(1)[0].isoformat(),
                "start_time": "16:00:00",
                "end_time": "17:00:00",
                "coach_name": "Coach Sam",
            }
        ]

    def test_requires_authentication(self, client: TestClient, catalog: SimpleNamespace) -> None:
        response = client.post(BOOKINGS_URL, json=_payload(catalog))

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "NOT_AUTHENTICATED"

    def test_vendor_token_is_forbidden(self, client: TestClient, catalog: SimpleNamespace) -> None:
        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog),
            headers=auth_headers_for(catalog.vendor.user_id, role="vendor"),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "PARENT_ROLE_REQUIRED"

    @pytest.mark.parametrize(
        "overrides, code",
        [
            ({"booking_type": "weekly"}, "INVALID_BOOKING_TYPE"),
            ({"booking_type": "package_4"}, "SESSION_COUNT_MISMATCH"),
        ],
    )
    def test_business_validation_is_400(
        self,
        client: TestClient,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        overrides: Dict[str, Any],
        code: str,
    ) -> None:
        response = client.post(
            BOOKINGS_URL, json=_payload(catalog, **overrides), headers=auth_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == 400
        assert body["code"] == code

    def test_past_date_is_400(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        payload = _payload(
            catalog,
            session_dates=session_payload([(catalog.open_schedule, future_date(-3))]),
        )

        response = client.post(BOOKINGS_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "PAST_DATE_BOOKING"
        assert response.json()["detail"] == "session 1: cannot book sessions in the past"

    def test_todays_date_is_400(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        today = datetime.now(timezone.utc).date()
        payload = _payload(
            catalog, session_dates=session_payload([(catalog.open_schedule, today)])
        )

        response = client.post(BOOKINGS_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "PAST_DATE_BOOKING"

    def test_empty_session_list_is_count_mismatch(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            BOOKINGS_URL, json=_payload(catalog, session_dates=[]), headers=auth_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "SESSION_COUNT_MISMATCH"
        assert body["errors"] == {"booking_type": "trial", "expected": 1, "received": 0}

    def test_malformed_payload_is_422(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        payload = _payload(catalog, unexpected="field")

        response = client.post(BOOKINGS_URL, json=payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_other_parents_child_is_hidden(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog, child_id=catalog.other_child.id),
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "CHILD_NOT_OWNED"

    def test_child_ownership_status_can_be_403(
        self,
        client: TestClient,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "child_ownership_status_code", 403)

        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog, child_id=catalog.other_child.id),
            headers=auth_headers,
        )

        assert response.status_code == 403

    def test_inactive_service_is_404(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog, service_id=catalog.inactive_service.id),
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "SERVICE_UNAVAILABLE"

    def test_unknown_preferred_coach_is_404(
        self,
        client: TestClient,
        db: Session,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        enforce_foreign_keys: None,
    ) -> None:
        response = client.post(
            BOOKINGS_URL, json=_payload(catalog, preferred_coach=99999), headers=auth_headers
        )

        assert response.status_code == 404
        assert response.json()["code"] == "COACH_NOT_FOUND"
        assert count_rows(db, Booking) == 0

    def test_preferred_coach_is_recorded(
        self,
        client: TestClient,
        db: Session,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        enforce_foreign_keys: None,
    ) -> None:
        response = client.post(
            BOOKINGS_URL,
            json=_payload(catalog, preferred_coach=catalog.coach.id),
            headers=auth_headers,
        )

        assert response.status_code == 201
        booking = db.get(Booking, response.json()["data"]["booking_id"])
        assert booking.preferred_coach_id == catalog.coach.id

    def test_full_slot_is_409_and_nothing_is_written(
        self,
        client: TestClient,
        db: Session,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "booking_retry_base_delay_ms", 0)
        day = future_date()
        occupy_slot(
            db,
            schedule=catalog.last_seat,
            session_date=day,
            parent_id=catalog.other_parent.id,
            child_id=catalog.other_child.id,
            vendor_id=catalog.vendor.id,
        )
        existing = count_rows(db, Booking)

        response = client.post(
            BOOKINGS_URL,
            json=_payload(
                catalog,
                booking_type="single",
                session_dates=session_payload([(catalog.last_seat, day)]),
            ),
            headers=auth_headers,
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "BOOKING_CONFLICT"
        assert body["detail"] == (
            "Booking failed due to concurrent reservations. Please try again."
        )
        assert body["errors"]["attempts"] == 3
        assert count_rows(db, Booking) == existing

    def test_expired_request_budget_is_503(
        self,
        client: TestClient,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "booking_request_timeout_seconds", 1e-9)

        response = client.post(BOOKINGS_URL, json=_payload(catalog), headers=auth_headers)

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "2"
        assert response.json()["code"] == "DEADLINE_EXCEEDED"


class TestGetBookingRoute:
    def _create(
        self, client: TestClient, catalog: SimpleNamespace, headers: Dict[str, str]
    ) -> int:
        response = client.post(
            BOOKINGS_URL, json=_payload(catalog, booking_type="package_4"), headers=headers
        )
        assert response.status_code == 201
        return int(response.json()["data"]["booking_id"])

    def test_owner_sees_details(
        self, client: TestClient, catalog: SimpleNamespace, auth_headers: Dict[str, str]
    ) -> None:
        booking_id = self._create(client, catalog, auth_headers)

        response = client.get(f"{BOOKINGS_URL}/{booking_id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["booking_id"] == booking_id
        assert data["vendor_name"] == "Splash Academy"
        assert data["total_amount"] == 60.0
        sessions: List[Dict[str, Any]] = data["sessions"]
        assert [s["session_number"] for s in sessions] == [1, 2, 3, 4]
        assert data["next_session"]["session_date"] == sessions[0]["session_date"]
        assert data["completed_sessions"] == 0

    def test_other_parent_is_forbidden(
        self,
        client: TestClient,
        catalog: SimpleNamespace,
        auth_headers: Dict[str, str],
        other_parent_headers: Dict[str, str],
    ) -> None:
        booking_id = self._create(client, catalog, auth_headers)

        response = client.get(f"{BOOKINGS_URL}/{booking_id}", headers=other_parent_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "BOOKING_ACCESS_DENIED"

    def test_unknown_booking_is_404(
        self, client: TestClient, auth_headers: Dict[str, str]
    ) -> None:
        response = client.get(f"{BOOKINGS_URL}/987654", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"

    def test_non_positive_id_is_422(
        self, client: TestClient, auth_headers: Dict[str, str]
    ) -> None:
        assert client.get(f"{BOOKINGS_URL}/0", headers=auth_headers).status_code == 422
