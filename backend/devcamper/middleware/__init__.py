"""
DevCamper Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Security Headers] → [Rate Limit]
            → [Sanitize] → [GZip] → [CORS] → Route Handler

    - Request ID first so every later log line (including 429s) carries it
    - Logging sees the final status and duration of everything below it
    - Rate limiting rejects before the body is read or sanitized
"""
