# Middleware package init
"""
StackIt Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit FIRST: Reject abusive clients (vote/view spam) before any processing
    2. Request ID: Generate correlation ID for logging and error responses
    3. Logging: Log request details with the generated request ID
"""
