"""
Recipe Book Backend — Auth Helper Routes
=========================================

What:  Small identity endpoints used by the frontend after Firebase sign-in.
       - GET /api/auth/me:  echoes the profile the client passes in
       - GET /auth-check:   tells the client whether its Authorization header
                            reached the server (proxy/CORS debugging aid)
Why:   Neither endpoint verifies anything; they carry no authority and never
       return token contents.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Header, Query

from app.exceptions import ValidationError
from app.schemas.recipe import AuthCheckResponse, AuthMeResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get(
    "/api/auth/me",
    response_model=AuthMeResponse,
    responses={400: {"description": "email or uid missing", "model": ErrorResponse}},
    summary="Echo the caller's profile",
)
async def auth_me(
    email: Optional[str] = Query(default=None),
    uid: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
) -> AuthMeResponse:
    if not email or not uid:
        raise ValidationError(message="email and uid are required")
    return AuthMeResponse(
        name=name or email.split("@")[0] or "User",
        email=email,
        uid=uid,
    )


@router.get(
    "/auth-check",
    response_model=AuthCheckResponse,
    response_model_exclude_none=True,
    summary="Report whether an Authorization header was received",
)
async def auth_check(
    authorization: Optional[str] = Header(default=None),
) -> AuthCheckResponse:
    if authorization:
        return AuthCheckResponse(message="Auth header received", header_length=len(authorization))
    return AuthCheckResponse(message="No auth header received")
