"""
DevConnector Backend - Health Check Route
==========================================

What:  GET /health for container probes and load balancers.
How:   Runs SELECT 1 against the database and asks GitHub for its rate
       limit status.

Status levels:
    - healthy:   database and GitHub reachable
    - degraded:  database reachable, GitHub not (only repo lookups suffer)
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from devconnector import __version__
from devconnector.database import engine
from devconnector.schemas.common import HealthResponse
from devconnector.services.github_service import github_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """Probes the database and GitHub and reports an aggregate status."""
    db_status = "connected"
    github_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check GitHub ──────────────────────────────────────────────────────
    if not await github_service.health_check():
        github_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        github=github_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
