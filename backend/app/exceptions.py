"""
Recipe Book Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Services raise domain errors; global handlers (registered in main.py)
       turn them into JSON responses with the right status code, so routes
       never build error responses by hand.
How:   Each exception carries a user-facing message and an optional context
       dict. Context is logged server-side and only curated keys are returned.

Exception Hierarchy:
    RecipeBookError (base)
    ├── ValidationError          → 400 Bad Request (missing field, bad ID format)
    ├── AuthenticationError      → 401 Unauthorized
    │   ├── UnauthenticatedError     (no bearer token)
    │   └── InvalidTokenError        (token rejected by the verifier)
    ├── ForbiddenError           → 403 Forbidden (ownership / self-like)
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class RecipeBookError(Exception):
    """
    Base exception for all Recipe Book application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipeBookError):
    """
    Raised when client input fails validation.

    When:    A required query/body field is missing, or a recipe ID is not a
             structurally valid identifier.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(RecipeBookError):
    """Base for 401 responses; the handler adds a WWW-Authenticate header."""

    error_code = "unauthenticated"


class UnauthenticatedError(AuthenticationError):
    """
    Raised when a protected route is called without a bearer token.

    When:    Authorization header missing, not using the Bearer scheme, or empty.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "No token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(AuthenticationError):
    """
    Raised when the token verifier rejects a bearer token.

    The provider's explanation (expired, bad signature, wrong audience…) is
    kept in `reason` and returned to the client under `details.reason`.
    """

    error_code = "invalid_token"

    def __init__(
        self,
        message: str = "Invalid token",
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class ForbiddenError(RecipeBookError):
    """
    Raised when the caller is identified but not allowed to act.

    When:    Updating/deleting someone else's recipe, or liking your own.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RecipeBookError):
    """
    Raised when a requested resource does not exist.

    The ORM returns None for missing rows; the service layer converts that
    into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(RecipeBookError):
    """
    Raised when a store operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation, driver error.
    HTTP:    500 Internal Server Error

    Security Note:
        The driver error is logged server-side only. The response carries the
        operation-level message ("Failed to fetch recipes"), never SQL text.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
