# Middleware package init
"""
Projects API — Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first so every log line and error envelope can carry it
    - Logging captures status and duration on the way back out
"""
