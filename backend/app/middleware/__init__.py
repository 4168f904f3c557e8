# Middleware package init
"""
Recipe Book Backend — Middleware Package
=========================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first so every later log line can carry it
    2. Logging wraps everything below it to time the full request
    3. CORS is FastAPI's CORSMiddleware (answers preflight OPTIONS requests)
"""
