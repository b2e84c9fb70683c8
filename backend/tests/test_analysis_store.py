"""
ClauseGuard Backend — Entitlement Store Tests
==============================================

What:  AnalysisStore against a real (in-memory SQLite) database.

What we test:
    ✅ save + get round trip, JSON clause lists preserved in order
    ✅ get on unknown token → None
    ✅ partial update (last write wins), unknown fields rejected
    ✅ paid flag is monotonic
    ✅ SQLAlchemy failures surface as DatabaseError
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from clauseguard.exceptions import DatabaseError, NotFoundError
from clauseguard.models import ContractAnalysis
from clauseguard.services.analysis_store import AnalysisStore


class TestAnalysisStore:

    def setup_method(self):
        self.store = AnalysisStore()

    @pytest.mark.asyncio
    async def test_save_and_get(self, db_session):
        record = ContractAnalysis(
            token="tok1",
            uid="u1",
            clause_text="análise",
            safe_clauses=[{"titulo": "A", "resumo": "a"}, {"titulo": "B", "resumo": "b"}],
            risky_clauses=[],
            recommendation="Consulte um advogado.",
        )
        await self.store.save(db_session, record)
        db_session.expunge_all()

        loaded = await self.store.get(db_session, "tok1")

        assert loaded is not None
        assert loaded.uid == "u1"
        assert [c["titulo"] for c in loaded.safe_clauses] == ["A", "B"]
        assert loaded.risky_clauses == []
        assert loaded.paid is False
        assert loaded.session_id is None
        assert loaded.created_at is not None

    @pytest.mark.asyncio
    async def test_get_unknown_token(self, db_session):
        assert await self.store.get(db_session, "nope") is None

    @pytest.mark.asyncio
    async def test_update_overwrites_session_id(self, make_analysis, db_session):
        await make_analysis(token="tok2")

        await self.store.update(db_session, "tok2", session_id="cs_1")
        await self.store.update(db_session, "tok2", session_id="cs_2")

        loaded = await self.store.get(db_session, "tok2")
        assert loaded.session_id == "cs_2"
        assert loaded.paid is False

    @pytest.mark.asyncio
    async def test_update_unknown_token(self, db_session):
        with pytest.raises(NotFoundError):
            await self.store.update(db_session, "missing", session_id="cs_1")

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_field(self, make_analysis, db_session):
        await make_analysis(token="tok3")
        with pytest.raises(ValueError):
            await self.store.update(db_session, "tok3", uid="someone-else")

    @pytest.mark.asyncio
    async def test_paid_cannot_be_reverted(self, make_analysis, db_session):
        await make_analysis(token="tok4")
        await self.store.mark_paid(db_session, "tok4")

        with pytest.raises(ValueError):
            await self.store.update(db_session, "tok4", paid=False)

        loaded = await self.store.get(db_session, "tok4")
        assert loaded.paid is True

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )

        with pytest.raises(DatabaseError):
            await self.store.get(mock_db_session, "tok5")
