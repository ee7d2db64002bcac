"""
WayShare Backend - Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation ID for logs, error bodies and X-Request-ID
    3. Logging: one access line per request, with the request ID and the
       alert key of successful mutations
    4. GZip / CORS: FastAPI-provided

    Responses travel the chain in reverse.
"""
