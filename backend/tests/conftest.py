"""
ClauseGuard Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at SQLite, a temp upload dir and dummy keys
       BEFORE any clauseguard import, so the settings singleton and the
       service singletons are built from test values.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── db_engine:       in-memory aiosqlite engine with the schema created
    ├── db_session:      real AsyncSession bound to db_engine
    ├── upload_dir:      the temp upload directory (emptiness checks)
    ├── make_analysis:   factory inserting ContractAnalysis rows
    └── test_client:     HTTPX AsyncClient with get_db_session overridden
"""

import os
import tempfile

# Override settings for testing BEFORE any clauseguard imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_not_real"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="clauseguard_test_")
os.environ["FRONTEND_URL"] = "https://app.example.test/"
os.environ["LOG_LEVEL"] = "WARNING"

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clauseguard.config import settings
from clauseguard.database import Base, dispose_engine, get_db_session
from clauseguard.models import ContractAnalysis


# ══════════════════════════════════════════════════════════════════════════
# Unit-test doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = record
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def upload_dir() -> Path:
    """The configured temp upload directory, emptied before the test."""
    path = Path(settings.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    for leftover in path.iterdir():
        leftover.unlink()
    return path


# ══════════════════════════════════════════════════════════════════════════
# Real database (in-memory SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncSession:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_analysis(db_session):
    """
    Factory inserting one ContractAnalysis row.

    Usage:
        record = await make_analysis(token="abc123", paid=True)
    """

    async def _make(**overrides) -> ContractAnalysis:
        fields = {
            "token": "abc1234567891700000000000",
            "uid": "u1",
            "clause_text": "Cláusula 1: rescisão unilateral sem aviso prévio.",
            "safe_clauses": [{"titulo": "Foro", "resumo": "Foro da capital."}],
            "risky_clauses": [{"titulo": "Rescisão", "resumo": "Sem aviso prévio."}],
            "recommendation": "Considere consultar um advogado para revisar o contrato.",
            "paid": False,
            "session_id": None,
        }
        fields.update(overrides)
        record = ContractAnalysis(**fields)
        db_session.add(record)
        await db_session.flush()
        return record

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_session):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Every request shares the test's db_session, so rows written by one call
    (or by the test itself) are visible to the next.
    """
    from clauseguard.main import app

    async def _override_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = _override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    await dispose_engine()
