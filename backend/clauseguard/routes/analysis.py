"""
ClauseGuard Backend — Analysis Route Handlers
==============================================

What:  POST /api/analisar-contrato   (upload and analyze a contract)
       POST /api/resumir-clausulas   (classify a clause analysis)
       GET  /api/analise-por-token   (fetch a paid analysis)
How:   Extract request data, delegate to AnalysisService, return schemas.
       `file`, `uid` and `token` are declared optional so that missing values
       produce the service's 400 message instead of FastAPI's 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from clauseguard.config import settings
from clauseguard.database import get_db_session
from clauseguard.schemas.analysis import (
    AnalysisResponse,
    ClassifyRequest,
    ClauseClassification,
    ErrorResponse,
    SubmitAnalysisResponse,
)
from clauseguard.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])


@router.post(
    "/analisar-contrato",
    response_model=SubmitAnalysisResponse,
    responses={
        400: {"description": "Missing file/uid, unsupported or unreadable file", "model": ErrorResponse},
        500: {"description": "Extraction or LLM failure", "model": ErrorResponse},
    },
    summary="Analyze an uploaded contract",
    description=(
        "Upload a contract (PDF, image or .txt, max 10MB) together with the user id. "
        "Returns the plain-language clause analysis and the token that unlocks the "
        "full report after payment."
    ),
)
async def submit_analysis(
    file: Optional[UploadFile] = File(default=None, description="Contract file"),
    uid: Optional[str] = Form(default=None, description="User identifier"),
    db: AsyncSession = Depends(get_db_session),
) -> SubmitAnalysisResponse:
    content = None
    media_type = None
    content_length = None
    if file is not None:
        # One byte past the limit is enough to reject an oversized upload
        content = await file.read(settings.max_file_size + 1)
        media_type = file.content_type
        content_length = file.size
        logger.info(
            "Received contract upload: type=%s, size=%d bytes",
            media_type or "unknown",
            len(content),
        )

    try:
        return await analysis_service.submit_analysis(
            db=db,
            uid=uid,
            content=content,
            media_type=media_type,
            content_length=content_length,
        )
    finally:
        if file is not None:
            await file.close()


@router.post(
    "/resumir-clausulas",
    response_model=ClauseClassification,
    responses={
        400: {"description": "Missing clause text", "model": ErrorResponse},
        500: {"description": "Model output could not be parsed", "model": ErrorResponse},
    },
    summary="Split a clause analysis into safe and risky clauses",
)
async def classify_clauses(body: Optional[ClassifyRequest] = None) -> ClauseClassification:
    return await analysis_service.classify_clauses(body.clause_text if body else None)


@router.get(
    "/analise-por-token",
    response_model=AnalysisResponse,
    responses={
        400: {"description": "Missing token", "model": ErrorResponse},
        403: {"description": "Payment not confirmed yet", "model": ErrorResponse},
        404: {"description": "Unknown token", "model": ErrorResponse},
    },
    summary="Fetch a paid analysis by token",
)
async def fetch_analysis(
    token: Optional[str] = Query(default=None, description="Analysis token"),
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    record = await analysis_service.fetch_analysis(db, token)
    return AnalysisResponse(analysis=record)
