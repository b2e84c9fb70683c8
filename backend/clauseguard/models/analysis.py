"""
ClauseGuard Backend — ContractAnalysis SQLAlchemy Model
========================================================

What:  ORM model for the `contract_analyses` table: one document per token.
How:   SQLAlchemy 2.0 declarative mapping; clause lists are JSON columns
       (JSONB on PostgreSQL) holding `[{"titulo": ..., "resumo": ...}]`.
Who:   Read and written only through AnalysisStore; Alembic reads it for migrations.

Table Design:
    - token: opaque string primary key, generated at analysis time, never reused
    - uid: caller-supplied user id (not verified against any auth system)
    - created_at: UTC timestamp, set once
    - clause_text: raw LLM analysis
    - safe_clauses / risky_clauses: ordered lists, empty when classification failed
    - recommendation: static advisory text
    - paid: entitlement flag, false → true only
    - session_id: latest Stripe checkout session, overwritten on each checkout

    Index on uid: supports looking up a user's analyses from the admin side.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, Index, String, Text, false
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from clauseguard.database import Base

ClauseList = List[Dict[str, Any]]

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class ContractAnalysis(Base):
    """
    Persisted result of one contract analysis.

    Lifecycle:
        1. Inserted right after the LLM analysis succeeds (paid = False)
        2. session_id set (and overwritten) by each checkout creation
        3. paid set to True once Stripe confirms the session
        4. Never deleted
    """

    __tablename__ = "contract_analyses"

    token: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Opaque per-analysis token (random hex + ms timestamp)",
    )

    uid: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Caller-supplied user identifier",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the analysis was created (UTC)",
    )

    clause_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-text clause analysis returned by the LLM",
    )

    safe_clauses: Mapped[ClauseList] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Clauses classified as safe: [{titulo, resumo}]",
    )

    risky_clauses: Mapped[ClauseList] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Clauses classified as risky: [{titulo, resumo}]",
    )

    recommendation: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Static advisory text",
    )

    paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Entitlement flag; monotonically false → true",
    )

    session_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Latest Stripe checkout session for this token",
    )

    __table_args__ = (
        Index("idx_contract_analyses_uid", "uid"),
    )

    def __repr__(self) -> str:
        return (
            f"<ContractAnalysis(token='{self.token}', paid={self.paid}, "
            f"created_at='{self.created_at}')>"
        )
