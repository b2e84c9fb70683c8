"""Create contract_analyses table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `contract_analyses` table: one row per analysis token.
How:   Text primary key (the token itself), JSONB clause lists, boolean
       entitlement flag defaulting to false, index on uid.

Rollback: downgrade() drops the table (all analyses and entitlements lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the contract_analyses table and its uid index."""
    op.create_table(
        "contract_analyses",
        sa.Column(
            "token",
            sa.String(64),
            nullable=False,
            comment="Opaque per-analysis token (random hex + ms timestamp)",
        ),
        sa.Column(
            "uid",
            sa.Text(),
            nullable=False,
            comment="Caller-supplied user identifier",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the analysis was created (UTC)",
        ),
        sa.Column(
            "clause_text",
            sa.Text(),
            nullable=False,
            comment="Free-text clause analysis returned by the LLM",
        ),
        sa.Column(
            "safe_clauses",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="Clauses classified as safe: [{titulo, resumo}]",
        ),
        sa.Column(
            "risky_clauses",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="Clauses classified as risky: [{titulo, resumo}]",
        ),
        sa.Column(
            "recommendation",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Static advisory text",
        ),
        sa.Column(
            "paid",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Entitlement flag; monotonically false → true",
        ),
        sa.Column(
            "session_id",
            sa.String(255),
            nullable=True,
            comment="Latest Stripe checkout session for this token",
        ),
        sa.PrimaryKeyConstraint("token"),
    )

    op.create_index(
        "idx_contract_analyses_uid",
        "contract_analyses",
        ["uid"],
    )


def downgrade() -> None:
    """Drop the contract_analyses table."""
    op.drop_index("idx_contract_analyses_uid", table_name="contract_analyses")
    op.drop_table("contract_analyses")
