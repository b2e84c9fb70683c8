"""
ClauseGuard Backend — Payment Route Handlers
=============================================

What:  POST /api/create-checkout-session   (start a Stripe checkout for a token)
       GET  /api/analise-liberada          (pull-based payment confirmation)
How:   Delegate to AnalysisService; the release check is safe to poll.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clauseguard.database import get_db_session
from clauseguard.schemas.analysis import (
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    ReleaseResponse,
)
from clauseguard.services.analysis_service import analysis_service

router = APIRouter(prefix="/api", tags=["Payments"])


@router.post(
    "/create-checkout-session",
    response_model=CheckoutResponse,
    responses={
        400: {"description": "Missing token", "model": ErrorResponse},
        404: {"description": "Unknown token", "model": ErrorResponse},
        500: {"description": "Payment gateway failure", "model": ErrorResponse},
    },
    summary="Create a checkout session for an analysis",
)
async def create_checkout_session(
    body: Optional[CheckoutRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> CheckoutResponse:
    url = await analysis_service.create_checkout(db, body.token if body else None)
    return CheckoutResponse(url=url)


@router.get(
    "/analise-liberada",
    response_model=ReleaseResponse,
    responses={
        400: {"description": "Missing token or no checkout session yet", "model": ErrorResponse},
        404: {"description": "Unknown token", "model": ErrorResponse},
        500: {"description": "Payment gateway failure", "model": ErrorResponse},
    },
    summary="Check whether an analysis has been paid",
    description=(
        "Asks the payment gateway for the status of the token's checkout session and "
        "records the payment once confirmed. Idempotent: safe to poll."
    ),
)
async def check_release(
    token: Optional[str] = Query(default=None, description="Analysis token"),
    db: AsyncSession = Depends(get_db_session),
) -> ReleaseResponse:
    released = await analysis_service.check_release(db, token)
    return ReleaseResponse(released=released)
