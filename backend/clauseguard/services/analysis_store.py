"""
ClauseGuard Backend — Entitlement Store
========================================

What:  Persistence for analysis records, keyed by token.
How:   Thin async SQLAlchemy wrapper over the ContractAnalysis table. Each
       method takes the request's AsyncSession; the session dependency
       commits at the end of the request.
Who:   Called by AnalysisService only.

Semantics:
    save(record)            insert one record (token must be new)
    get(token)              record or None; None is the distinguishable not-found result
    update(token, **fields) partial update, last write wins, no cross-call transaction
    mark_paid(token)        paid = True; the flag never goes back to False
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clauseguard.exceptions import DatabaseError, NotFoundError
from clauseguard.models.analysis import ContractAnalysis

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "clause_text",
    "safe_clauses",
    "risky_clauses",
    "recommendation",
    "paid",
    "session_id",
})


class AnalysisStore:
    """Async SQLAlchemy-backed store of ContractAnalysis records."""

    async def save(self, db: AsyncSession, record: ContractAnalysis) -> ContractAnalysis:
        try:
            db.add(record)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save analysis %s: %s", record.token, str(e))
            raise DatabaseError(context={"token": record.token, "error_type": type(e).__name__})
        logger.info("Analysis saved: token=%s uid=%s", record.token, record.uid)
        return record

    async def get(self, db: AsyncSession, token: str) -> Optional[ContractAnalysis]:
        try:
            result = await db.execute(
                select(ContractAnalysis).where(ContractAnalysis.token == token)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to load analysis %s: %s", token, str(e))
            raise DatabaseError(context={"token": token, "error_type": type(e).__name__})

    async def update(self, db: AsyncSession, token: str, **fields: Any) -> ContractAnalysis:
        """
        Apply a partial update to one record.

        Raises:
            NotFoundError: Unknown token.
            ValueError: Unknown field, or an attempt to set paid back to False.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if fields.get("paid") is False:
            raise ValueError("The paid flag cannot be reverted")

        record = await self.get(db, token)
        if record is None:
            raise NotFoundError(resource_id=token)

        for name, value in fields.items():
            setattr(record, name, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update analysis %s: %s", token, str(e))
            raise DatabaseError(context={"token": token, "error_type": type(e).__name__})
        return record

    async def mark_paid(self, db: AsyncSession, token: str) -> ContractAnalysis:
        record = await self.update(db, token, paid=True)
        logger.info("Analysis %s marked as paid", token)
        return record


analysis_store = AnalysisStore()
