# backend/app/routes/v1/health.py
"""
Health check endpoints for the application.

These endpoints are used for monitoring application health and
database connectivity.
"""

from datetime import datetime, timezone
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...api.dependencies import get_db
from ...core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: datetime
    checks: Dict[str, bool]


class LiveHealthResponse(BaseModel):
    ok: bool


@router.get("/live", response_model=LiveHealthResponse)
def live_probe(response: Response) -> LiveHealthResponse:
    """Liveness probe that avoids touching external dependencies."""
    response.headers["Cache-Control"] = "no-store"
    return LiveHealthResponse(ok=True)


@router.get("", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        Simple status indicating the service is running.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = True
        status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = False
        status = "degraded"

    return HealthCheckResponse(
        status=status,
        service=settings.api_title,
        version=settings.api_version,
        timestamp=datetime.now(timezone.utc),
        checks={"database": db_status},
    )
