"""
ClauseGuard Backend — Middleware Package
=========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id for logs, error bodies and the response header
    2. Logging:    access line with status and duration, tagged with the id
    3. GZip / CORS: FastAPI built-ins
"""
