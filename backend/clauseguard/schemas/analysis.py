"""
ClauseGuard Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract with the frontend.
How:   Python attributes are English; the wire format keeps the Portuguese keys
       the frontend already consumes (`clausulas`, `resumoSeguras`, `pago`, ...)
       through field aliases. FastAPI serializes response models by alias.
Who:   Used by route handlers as request bodies and return types.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain Models
# ══════════════════════════════════════════════════════════════════════════


class ClauseSummary(BaseModel):
    """One classified clause: short title plus short plain-language summary."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(alias="titulo", description="Short clause title")
    summary: str = Field(default="", alias="resumo", description="Short clause summary")


class ClauseClassification(BaseModel):
    """Safe/risky partition of a clause analysis."""

    model_config = ConfigDict(populate_by_name=True)

    safe: List[ClauseSummary] = Field(default_factory=list, alias="seguras")
    risky: List[ClauseSummary] = Field(default_factory=list, alias="riscos")


class AnalysisRecord(BaseModel):
    """
    What:  Full stored analysis, returned once the token is paid.
    Who:   Returned (wrapped) by GET /api/analise-por-token.
    """

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    token: str = Field(description="Opaque analysis token")
    uid: str = Field(description="Caller-supplied user identifier")
    created_at: datetime = Field(alias="data", description="Creation timestamp (UTC)")
    clause_text: str = Field(alias="clausulas", description="Free-text clause analysis")
    safe_clauses: List[ClauseSummary] = Field(default_factory=list, alias="resumoSeguras")
    risky_clauses: List[ClauseSummary] = Field(default_factory=list, alias="resumoRiscos")
    recommendation: str = Field(default="", alias="recomendacoes")
    paid: bool = Field(default=False, alias="pago")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ClassifyRequest(BaseModel):
    """Body of POST /api/resumir-clausulas. Blank text is rejected by the service."""

    model_config = ConfigDict(populate_by_name=True)

    clause_text: Optional[str] = Field(default=None, alias="clausulas")


class CheckoutRequest(BaseModel):
    """Body of POST /api/create-checkout-session."""

    token: Optional[str] = Field(default=None, description="Analysis token to unlock")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SubmitAnalysisResponse(BaseModel):
    """Returned by POST /api/analisar-contrato."""

    model_config = ConfigDict(populate_by_name=True)

    clause_text: str = Field(alias="clausulas", description="Free-text clause analysis")
    token: str = Field(description="Token identifying the stored analysis")


class CheckoutResponse(BaseModel):
    """Returned by POST /api/create-checkout-session."""

    url: str = Field(description="Stripe-hosted checkout page")


class ReleaseResponse(BaseModel):
    """Returned by GET /api/analise-liberada."""

    model_config = ConfigDict(populate_by_name=True)

    released: bool = Field(alias="liberado")


class AnalysisResponse(BaseModel):
    """Returned by GET /api/analise-por-token."""

    model_config = ConfigDict(populate_by_name=True)

    analysis: AnalysisRecord = Field(alias="analise")


class ErrorResponse(BaseModel):
    """
    Error body produced by every global exception handler.

    Example:
        {
            "error": "Arquivo ou UID ausente.",
            "code": "validation_error",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    llm: str = Field(description="LLM status: available, unavailable")
    payments: str = Field(description="Payment gateway: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
