# Middleware package init
"""
Todo Backend — Middleware Package
===================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: Generate or accept a correlation ID
    2. Logging: Log method, path, status, duration and user with that ID
    3. CORS: PreflightCORSMiddleware (bodiless 200 preflights, adds headers)

    Responses travel back through the same chain in reverse, so the request ID
    header is set on every response that leaves the logging layer.
"""
