"""
Recipe Book Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract between frontend and backend.
Why:   Validation, serialization and OpenAPI docs come from one place.

Design Decision:
    Recipes are schemaless documents: beyond the server-managed fields below,
    clients may store any JSON keys (title, ingredients, steps, ...). The
    response model therefore allows extra fields and serialises the managed
    ones under their camelCase API names (userId, likedBy, ...).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# Keys the server owns. Stripped from create/update bodies before storage.
RESERVED_FIELDS = frozenset(
    {"id", "_id", "userId", "userName", "likes", "likedBy", "createdAt"}
)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class RecipeResponse(BaseModel):
    """
    What:  Full representation of a recipe document.
    Who:   Returned by every recipe read/write endpoint.

    Extra keys (the client's own recipe fields) are kept as-is.
    """
    id: str = Field(description="Opaque recipe identifier (UUID string)")
    user_id: str = Field(alias="userId", description="Owner's user ID")
    user_name: str = Field(alias="userName", description="Owner's display name")
    likes: int = Field(ge=0, description="Number of distinct users who liked the recipe")
    liked_by: List[str] = Field(
        default_factory=list,
        alias="likedBy",
        description="User IDs that liked the recipe, in like order",
    )
    created_at: datetime = Field(alias="createdAt", description="Creation timestamp (UTC)")

    model_config = {"extra": "allow"}


class CountResponse(BaseModel):
    count: int = Field(ge=0, description="Number of matching recipes")


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")


class AuthMeResponse(BaseModel):
    """Echo of the identity a client believes it has (GET /api/auth/me)."""
    name: str
    email: str
    uid: str


class AuthCheckResponse(BaseModel):
    """Debug probe telling the client whether its Authorization header arrived."""
    message: str
    header_length: Optional[int] = Field(default=None, alias="headerLength")

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "forbidden")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "forbidden",
            "message": "You can't like your own recipe",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response for monitoring and load balancer probes.

    status is "ok" when the database answers and "degraded" otherwise; the
    endpoint itself always answers 200 so the process is never killed for a
    database blip.
    """
    status: str = Field(description="Overall service status: ok, degraded")
    db: str = Field(description="Database connectivity: connected, disconnected")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")
