from types import SimpleNamespace
from typing import Dict

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.factories.booking_builders import future_date, occupy_slot, session_payload


def test_live_probe(client: TestClient) -> None:
    response = client.get("/api/v1/health/live")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["Cache-Control"] == "no-store"


def test_health_checks_database(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": True}


def test_prometheus_exposes_booking_counters(
    client: TestClient, db: Session, catalog: SimpleNamespace, auth_headers: Dict[str, str]
) -> None:
    day = future_date()
    occupy_slot(
        db,
        schedule=catalog.last_seat,
        session_date=day,
        parent_id=catalog.other_parent.id,
        child_id=catalog.other_child.id,
        vendor_id=catalog.vendor.id,
    )
    client.post(
        "/api/v1/bookings",
        json={
            "child_id": catalog.child.id,
            "service_id": catalog.service.id,
            "booking_type": "single",
            "session_dates": session_payload([(catalog.last_seat, day)]),
        },
        headers=auth_headers,
    )

    response = client.get("/api/v1/metrics/prometheus")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert "kidsbooking_booking_retries_total" in text
    assert 'reason="slot_conflict"' in text
    assert "kidsbooking_booking_conflicts_total" in text
    assert "kidsbooking_service_operation_duration_seconds" in text
