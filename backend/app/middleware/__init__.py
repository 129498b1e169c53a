# Middleware package init
"""
Library API — Middleware Package
==================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id for logging and the X-Request-ID header
    2. Logging: method, path, status and duration, tagged with the request id
"""
