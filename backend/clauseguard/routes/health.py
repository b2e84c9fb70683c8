"""
ClauseGuard Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the analysis store, the LLM provider and the payment gateway
       configuration, and returns an aggregate status.

Status levels:
    - healthy:   All dependencies operational (HTTP 200)
    - degraded:  LLM unreachable or payments not configured (HTTP 200)
    - unhealthy: Database unreachable (HTTP 200, body says so)
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from clauseguard import __version__
from clauseguard.schemas.analysis import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """
    Probe each dependency with the cheapest call available.

    Database: SELECT 1
    LLM:      list_models() (no token cost)
    Payments: secret key present (no Stripe call)
    """
    from clauseguard.database import engine
    from clauseguard.services.gemini_service import gemini_service
    from clauseguard.services.payment_service import payment_service

    db_status = "connected"
    llm_status = "available"
    payments_status = "configured"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await gemini_service.health_check():
        llm_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    if not payment_service.is_configured:
        payments_status = "not_configured"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        llm=llm_status,
        payments=payments_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
