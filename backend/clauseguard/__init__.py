"""
ClauseGuard Backend — Application Package Initializer
======================================================

What: Marks the `clauseguard` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is a thin layered orchestration around external services:

    ┌──────────────────────────────────────────┐
    │        Routes (API Layer)                │  ← HTTP concerns only
    ├──────────────────────────────────────────┤
    │  AnalysisService (Orchestrator)          │  ← token, temp file, gating
    ├──────────────────────────────────────────┤
    │  TextExtractor │ ClauseAnalyzer │        │
    │  ClauseClassifier │ PaymentService       │  ← one external service each
    ├──────────────────────────────────────────┤
    │  AnalysisStore + ContractAnalysis model  │  ← async SQLAlchemy
    └──────────────────────────────────────────┘
"""

__version__ = "1.0.0"
