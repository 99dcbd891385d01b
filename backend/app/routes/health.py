"""
SentenceBoard Backend - Health Check Route
============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports whether Google
       sign-in is configured.

Status levels:
    healthy:    database reachable                          (HTTP 200)
    unhealthy:  database unreachable                        (HTTP 200, flagged)

Google sign-in being unconfigured is reported but does not change the
status; local login still works without it.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.google_oauth import google_oauth_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        google_oauth="configured" if google_oauth_client.enabled else "not_configured",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
