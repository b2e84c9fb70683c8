"""
ClauseGuard Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the analysis store.
How:   Each service wraps one external collaborator and exposes a module-level
       singleton; AnalysisService composes them into the API operations.

Service Inventory:
    - TextExtractor:     PDF / OCR / plain-text readers
    - LLMService:        abstract text generation; GeminiService implements it
    - ClauseAnalyzer:    risky-clause explanation prompt
    - ClauseClassifier:  safe/risky JSON partition with lenient parsing
    - AnalysisStore:     ContractAnalysis persistence (entitlement store)
    - PaymentService:    Stripe Checkout sessions
    - FileService:       upload filter and scoped temporary files
    - AnalysisService:   request orchestrator
"""
