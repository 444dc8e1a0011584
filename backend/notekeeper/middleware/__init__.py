# Middleware package init
"""
Notekeeper Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID FIRST: the correlation ID exists before anything logs
    2. Logging: method, path, status and duration, tagged with that ID
    3. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

    Responses travel the chain in reverse, so the X-Request-ID header is
    attached after the access log line has been written.
"""
