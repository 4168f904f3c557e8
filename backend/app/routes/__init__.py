# Routes package init
"""
Recipe Book Backend — API Routes Package
=========================================

Route Inventory:
    - recipes.py: /api/recipes (count, my/count, top, my, {id}, CRUD, like)
    - auth.py:    GET /api/auth/me, GET /auth-check
    - health.py:  GET /health, GET /

Routes stay THIN: read the request, choose the caller identity, call the
service, return its result. Business rules live in app/services.
"""
