"""
ClauseGuard Backend — API Routes Package
=========================================

Route Inventory:
    - analysis.py:  POST /api/analisar-contrato
                    POST /api/resumir-clausulas
                    GET  /api/analise-por-token
    - payments.py:  POST /api/create-checkout-session
                    GET  /api/analise-liberada
    - health.py:    GET  /health

Routes stay thin: they read the request, call AnalysisService and return a
schema. Errors propagate to the global exception handlers in main.py.
"""
