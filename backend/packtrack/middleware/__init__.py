# Middleware package init
"""
PackTrack Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [CORS/GZip] → Route Handler

    Request ID runs first so the access log line and every log entry written
    while handling the request can carry the same correlation ID.
"""
