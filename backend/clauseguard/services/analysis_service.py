"""
ClauseGuard Backend — Analysis Service (Request Orchestrator)
==============================================================

What:  Wires extraction, analysis, classification, storage and payment into
       the five API operations.
How:   Composes the service singletons; receives the request's AsyncSession.
Who:   Called by the route handlers in routes/analysis.py and routes/payments.py.

Submit flow (POST /api/analisar-contrato):
    ┌──────────┐   ┌────────────┐   ┌─────────┐   ┌──────────┐   ┌────────────┐   ┌───────┐
    │ Validate │──▶│ Temp file  │──▶│ Extract │──▶│ Analyze  │──▶│ Classify   │──▶│ Save  │
    │ uid/file │   │ (scoped)   │   │ text    │   │ (LLM)    │   │ (soft)     │   │ token │
    └──────────┘   └────────────┘   └─────────┘   └──────────┘   └────────────┘   └───────┘
    The temp file is deleted when the scope closes, right after the LLM call,
    on success and failure alike.

Token state machine:
    CREATED (unpaid) ──checkout──▶ SESSION_CREATED ──release check (Stripe paid)──▶ PAID
    Repeated checkouts overwrite session_id. PAID is absorbing.
"""

import logging
import time
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from clauseguard.exceptions import (
    AnalysisLockedError,
    ClassificationError,
    NotFoundError,
    PaymentStateError,
    ValidationError,
)
from clauseguard.models.analysis import ContractAnalysis
from clauseguard.schemas.analysis import (
    AnalysisRecord,
    ClauseClassification,
    SubmitAnalysisResponse,
)
from clauseguard.services.analysis_store import analysis_store
from clauseguard.services.clause_analyzer import clause_analyzer
from clauseguard.services.clause_classifier import clause_classifier
from clauseguard.services.file_service import file_service
from clauseguard.services.payment_service import PaymentStatus, payment_service
from clauseguard.services.text_extractor import text_extractor

logger = logging.getLogger(__name__)

RECOMMENDATION = "Considere consultar um advogado para revisar o contrato."

MISSING_UPLOAD_MESSAGE = "Arquivo ou UID ausente."
UNREADABLE_MESSAGE = (
    "Não foi possível extrair texto do contrato. "
    "Verifique se o PDF, imagem ou .txt é legível."
)
MISSING_TOKEN_MESSAGE = "Token ausente."


def generate_token() -> str:
    """
    Opaque analysis token: 12 random hex chars followed by the epoch in ms.

    Unique in practice (random part + timestamp), not a security credential.
    Matches [a-z0-9]+.
    """
    return f"{uuid.uuid4().hex[:12]}{int(time.time() * 1000)}"


def _require_token(token: Optional[str]) -> str:
    if token is None or not token.strip():
        raise ValidationError(message=MISSING_TOKEN_MESSAGE, field="token")
    return token.strip()


class AnalysisService:
    """
    Stateless orchestrator. All cross-request state lives in the analysis store.
    """

    async def submit_analysis(
        self,
        db: AsyncSession,
        uid: Optional[str],
        content: Optional[bytes],
        media_type: Optional[str],
        content_length: Optional[int] = None,
    ) -> SubmitAnalysisResponse:
        """
        Extract, analyze, classify and store an uploaded contract.

        Raises:
            ValidationError: Missing file/uid, bad size, or no readable text (400)
            UnsupportedMediaError: Media type outside the upload filter (400)
            ExtractionError: Unreadable PDF (400) or I/O fault (500)
            AnalysisError: LLM call failed (500)
        """
        if content is None or not uid or not uid.strip():
            raise ValidationError(message=MISSING_UPLOAD_MESSAGE)
        uid = uid.strip()

        normalized_type = file_service.validate_upload(media_type, content, content_length)

        async with file_service.temporary_upload(content, normalized_type) as path:
            text = await run_in_threadpool(text_extractor.extract, path, normalized_type)
            if not text.strip():
                raise ValidationError(message=UNREADABLE_MESSAGE, field="file")

            clause_text = await clause_analyzer.analyze(text, uid)

        classification = await self._classify_best_effort(clause_text)

        token = generate_token()
        await analysis_store.save(
            db,
            ContractAnalysis(
                token=token,
                uid=uid,
                clause_text=clause_text,
                safe_clauses=[c.model_dump(by_alias=True) for c in classification.safe],
                risky_clauses=[c.model_dump(by_alias=True) for c in classification.risky],
                recommendation=RECOMMENDATION,
                paid=False,
            ),
        )

        return SubmitAnalysisResponse(clause_text=clause_text, token=token)

    async def _classify_best_effort(self, clause_text: str) -> ClauseClassification:
        try:
            return await clause_classifier.classify(clause_text)
        except ClassificationError as e:
            logger.warning(
                "Classification skipped, saving empty lists: %s | %s", e.message, e.context
            )
            return ClauseClassification()

    async def classify_clauses(self, clause_text: Optional[str]) -> ClauseClassification:
        """Standalone classification; failures surface as ClassificationError (500)."""
        if clause_text is None or not clause_text.strip():
            raise ValidationError(message="Texto das cláusulas ausente.", field="clausulas")
        return await clause_classifier.classify(clause_text)

    async def _get_or_404(self, db: AsyncSession, token: str) -> ContractAnalysis:
        record = await analysis_store.get(db, token)
        if record is None:
            raise NotFoundError(resource_id=token)
        return record

    async def create_checkout(self, db: AsyncSession, token: Optional[str]) -> str:
        """
        Create a Stripe checkout for `token` and remember its session id.

        Returns:
            The checkout URL to redirect the client to.
        """
        token = _require_token(token)
        await self._get_or_404(db, token)

        session = await payment_service.create_checkout_session(token)
        await analysis_store.update(db, token, session_id=session.session_id)
        return session.url

    async def check_release(self, db: AsyncSession, token: Optional[str]) -> bool:
        """
        Confirm payment for `token` with Stripe; idempotent.

        Once the record is paid the answer is True without another gateway call.

        Raises:
            NotFoundError: Unknown token (404)
            PaymentStateError: No checkout session yet (400)
            GatewayError: Stripe failure (500)
        """
        token = _require_token(token)
        record = await self._get_or_404(db, token)

        if record.paid:
            return True
        if not record.session_id:
            raise PaymentStateError(context={"token": token})

        status = await payment_service.get_session_status(record.session_id)
        if status is PaymentStatus.PAID:
            await analysis_store.mark_paid(db, token)
            return True
        return False

    async def fetch_analysis(self, db: AsyncSession, token: Optional[str]) -> AnalysisRecord:
        """
        Return the full record, gated on the entitlement flag.

        Raises:
            ValidationError: Missing token (400)
            NotFoundError: Unknown token (404)
            AnalysisLockedError: Not paid yet (403)
        """
        token = _require_token(token)
        record = await self._get_or_404(db, token)
        if not record.paid:
            raise AnalysisLockedError(context={"token": token})
        return AnalysisRecord.model_validate(record)


# ── Singleton Instance ────────────────────────────────────────────────────
analysis_service = AnalysisService()
