"""
Recipe Book Backend — Application Package
=========================================

Layers, top to bottom:
    routes/    HTTP concerns and caller identity selection
    security   bearer token dependencies
    services/  recipe rules and token verification strategies
    models/    SQLAlchemy ORM tables;  schemas/  Pydantic API contracts
    database   async engine, per-request sessions, lifecycle helpers

Routes never touch SQL; services never touch HTTP objects.
"""

__version__ = "1.0.0"
